from .tokens import UserRole, TokenData, CurrentUser
