"""Service layer public API.

Services orchestrate validation, uniqueness checks, secret hashing and
transaction boundaries around the stores. Every operation returns a typed
outcome from :mod:`lockbox.services._shared.results` instead of raising.

Subpackages
-----------
- :mod:`lockbox.services.accounts`: :class:`TransactionalAccountService`.
- :mod:`lockbox.services.files`: :class:`TransactionalFileService`.
- :mod:`lockbox.services.auth`: :class:`AuthService`, the authentication
  orchestrator built on the two above and the secret service.

Imports are left to the subpackages so the execution-context layer can depend
on :mod:`lockbox.services._shared.errors` without import cycles.
"""
