from formhost.models.audit_event import AuditEvent
from formhost.models.category import Category
from formhost.models.form import Form
from formhost.models.form_draft import FormDraft
from formhost.models.form_field import FormField
from formhost.models.form_submission import FormSubmission
from formhost.models.form_version import FormVersion
from formhost.models.rbac import Role, UserRole
from formhost.models.template import Template
from formhost.models.user import User

__all__ = [ "AuditEvent", "Category", "Form", "FormDraft",
           "FormField", "FormSubmission", "FormVersion", "Role",
           "UserRole", "Template", "User" ]
