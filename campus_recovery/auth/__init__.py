from .tokens import generate_access_token, validate_access_token
