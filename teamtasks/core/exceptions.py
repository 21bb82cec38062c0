# teamtasks/core/exceptions.py

class BaseAppException(Exception):
    """Базовый класс для всех кастомных исключений приложения."""
    status_code: int = 400

    def __init__(self, message: str = "App exception"):
        super().__init__(message)
        self.message = message

# ==== Валидация ====

class ValidationError(BaseAppException):
    """Некорректные или отсутствующие входные данные."""
    status_code = 400

    def __init__(self, message: str = "Validation error"):
        super().__init__(message)

class TaskValidationError(ValidationError):
    """Ошибка валидации задачи."""
    def __init__(self, message: str = "Task validation error"):
        super().__init__(message)

class TeamValidationError(ValidationError):
    """Ошибка валидации команды или членства."""
    def __init__(self, message: str = "Team validation error"):
        super().__init__(message)

# ==== Аутентификация / авторизация ====

class AuthenticationError(BaseAppException):
    """Нет токена, токен невалиден/просрочен или указывает на удалённого пользователя."""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)

class AuthorizationError(BaseAppException):
    """Пользователь аутентифицирован, но действие ему не разрешено."""
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)

# ==== NotFound ====

class NotFoundError(BaseAppException):
    """Ошибка отсутствия ресурса."""
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)

class UserNotFound(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)

class TaskNotFound(NotFoundError):
    def __init__(self, message: str = "Task not found"):
        super().__init__(message)

class TeamNotFound(NotFoundError):
    def __init__(self, message: str = "Team not found"):
        super().__init__(message)

class NotificationNotFound(NotFoundError):
    def __init__(self, message: str = "Notification not found"):
        super().__init__(message)

class InvitationNotFound(NotFoundError):
    def __init__(self, message: str = "Invitation not found"):
        super().__init__(message)

# ==== Конфликты ====

class ConflictError(BaseAppException):
    """Запись уже существует (дубликат email, членства и т.п.)."""
    status_code = 409

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)

class UserAlreadyExists(ConflictError):
    def __init__(self, message: str = "User already exists"):
        super().__init__(message)

class AlreadyTeamMember(ConflictError):
    def __init__(self, message: str = "User is already a member"):
        super().__init__(message)
