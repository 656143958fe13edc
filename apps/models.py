"""
Model registration for migrations and create_all: import every table model here.
When adding/removing apps, add/remove the corresponding imports here.
"""
from apps.identity.models import Tenant, User
from apps.projects.models import Project
from apps.tasks.models import Task
from apps.audit.models import AuditLog

__all__ = ["Tenant", "User", "Project", "Task", "AuditLog"]
