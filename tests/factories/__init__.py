"""Factory Boy setup for test data generation.

Factories build the frozen domain dataclasses; persisting them is the job of
the service or store under test, so no SQLAlchemy session is involved.
"""

from __future__ import annotations

from faker import Faker

faker = Faker()
Faker.seed(1234)
