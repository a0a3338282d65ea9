from .authenticate_user import AuthenticateUserUseCase
from .change_password import ChangePasswordInput, ChangePasswordUseCase
from .get_user import GetUserUseCase
from .list_users import ListUsersUseCase
from .manage_user import DisableUserUseCase, EnableUserUseCase
from .register_user import RegisterUserInput, RegisterUserUseCase
from .users_results import AuthenticateResult, AuthError, AuthErrorCode

__all__ = [
    "AuthError",
    "AuthErrorCode",
    "AuthenticateResult",
    "AuthenticateUserUseCase",
    "ChangePasswordInput",
    "ChangePasswordUseCase",
    "DisableUserUseCase",
    "EnableUserUseCase",
    "GetUserUseCase",
    "ListUsersUseCase",
    "RegisterUserInput",
    "RegisterUserUseCase",
]
