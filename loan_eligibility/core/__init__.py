from .config import settings, Settings
from .security import hash_password, verify_password, create_access_token, decode_token, is_valid_password
