"""
Settings page: the signed in user edits their name, email and password.
"""
import logging
from dataclasses import dataclass

from .errors import ValidationError
from .views import ViewController, Message

logger = logging.getLogger(__name__)


@dataclass
class SettingsForm:
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""

    def validate(self):
        if not self.name.strip() or not self.email.strip():
            raise ValidationError("Name and email are required")
        if self.password and self.password != self.confirm_password:
            raise ValidationError("Passwords do not match")


class SettingsController(ViewController):

    def __init__(self, manager, token=None):
        super().__init__(manager.backend, token)
        self.manager = manager
        user = manager.state.user or {}
        self.form = SettingsForm(name=user.get('name') or "", email=user.get('email') or "")

    def _save(self, form):
        error = self.manager.update_profile({'name': form.name})
        if error is not None:
            raise error

        current_email = (self.manager.state.user or {}).get('email')
        if form.email != current_email:
            self.manager.auth.update_user({'email': form.email})
        if form.password:
            self.manager.auth.update_user({'password': form.password})

    def submit(self, form):
        """Validate and save the form; returns True on success"""
        self.clear_message()
        self.form = form
        try:
            form.validate()
        except ValidationError as e:
            self.message = Message.failure(str(e))
            return False

        ok, _ = self.run(lambda: self._save(form), "updating profile", failure="Failed to update profile")
        if not ok:
            return False

        self.message = Message.success("Profile updated successfully")
        form.password = ""
        form.confirm_password = ""
        return True
