from .hashing import hash_secret, verify_secret
from .codes import generate_code
