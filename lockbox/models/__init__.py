from lockbox.models.account import AccountRecord
from lockbox.models.file import FileRecord

__all__ = [
    "AccountRecord",
    "FileRecord",
]
