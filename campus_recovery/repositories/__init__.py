from .base_repository import BaseRepository
from .account_repository import AccountRepository
