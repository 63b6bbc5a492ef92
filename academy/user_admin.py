"""
User administration: list, create, edit and delete user accounts.

An account is an auth identity plus a row in the users table with the same id.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError
from .views import ViewController, Message

logger = logging.getLogger(__name__)

USERS_TABLE = 'users'
ROLES = ('user', 'admin')


@dataclass
class UserForm:
    name: str = ""
    email: str = ""
    password: str = ""
    role: str = 'user'
    user_id: Optional[str] = None  # set when editing

    def validate(self):
        if not self.name.strip() or not self.email.strip():
            raise ValidationError("Name and email are required")
        if self.user_id is None and not self.password.strip():
            raise ValidationError("Password is required for new users")
        if self.role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")

    @classmethod
    def from_user(cls, user):
        return cls(
            name=user.get('name', ''),
            email=user.get('email', ''),
            role=user.get('role', 'user'),
            user_id=user.get('id'),
        )


class UserAdminController(ViewController):

    def __init__(self, backend, auth, token=None):
        super().__init__(backend, token)
        self.auth = auth
        self.users = []

    def load(self):
        ok, rows = self.run(
            lambda: self.backend.table(USERS_TABLE).select(order='name'),
            "fetching users", failure="Failed to load users", on_error='error'
        )
        if ok:
            self.users = rows

    def find(self, user_id):
        return next((u for u in self.users if u.get('id') == user_id), None)

    def _create(self, form):
        identity = self.auth.sign_up(form.email, form.password)
        self.backend.table(USERS_TABLE).insert({
            'id': identity['id'],
            'name': form.name,
            'email': form.email,
            'role': form.role,
        })
        logger.info(f"Created user {identity['id']} with role {form.role}")

    def _update(self, form):
        self.backend.table(USERS_TABLE).update(
            {'id': form.user_id}, {'name': form.name, 'role': form.role}
        )
        existing = self.find(form.user_id)
        if existing is None or existing.get('email') != form.email:
            self.auth.admin_update_user(form.user_id, {'email': form.email})
        if form.password.strip():
            self.auth.admin_update_user(form.user_id, {'password': form.password})

    def save_user(self, form):
        """Create or update an account; returns True on success"""
        self.clear_message()
        try:
            form.validate()
        except ValidationError as e:
            self.message = Message.failure(str(e))
            return False

        if form.user_id is not None:
            ok, _ = self.run(lambda: self._update(form), "saving user", failure="Failed to save user")
            done = "User updated successfully"
        else:
            ok, _ = self.run(lambda: self._create(form), "saving user", failure="Failed to save user")
            done = "User created successfully"
        if not ok:
            return False

        self.message = Message.success(done)
        self.load()
        return True

    def delete_user(self, user_id):
        """Delete the profile row, then the auth identity"""
        self.clear_message()

        def delete():
            self.backend.table(USERS_TABLE).delete({'id': user_id})
            self.auth.admin_delete_user(user_id)

        ok, _ = self.run(delete, "deleting user", failure="Failed to delete user")
        if not ok:
            return False
        self.message = Message.success("User deleted successfully")
        self.load()
        return True
