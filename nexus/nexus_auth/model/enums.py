import enum


class UserRole(str, enum.Enum):
    admin = "Admin"
    faculty = "Faculty"
    student = "Student"
