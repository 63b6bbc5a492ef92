"""
Course administration: create, edit and delete modules and their chapters.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError
from .views import ViewController, Message

logger = logging.getLogger(__name__)

MODULES_TABLE = 'modules'
CHAPTERS_TABLE = 'chapters'
CHAPTER_STATUSES = ('draft', 'live')


@dataclass
class ModuleForm:
    title: str = ""
    module_id: Optional[object] = None  # set when editing

    def validate(self):
        if not self.title.strip():
            raise ValidationError("Module title is required")


@dataclass
class ChapterForm:
    title: str = ""
    youtube_link: str = ""
    status: str = 'draft'
    module_id: Optional[object] = None
    chapter_id: Optional[object] = None  # set when editing

    def validate(self):
        if not self.title.strip() or not self.youtube_link.strip() or self.module_id is None:
            raise ValidationError("All fields are required")
        if self.status not in CHAPTER_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(CHAPTER_STATUSES)}")

    def row(self):
        return {
            'title': self.title,
            'youtube_link': self.youtube_link,
            'status': self.status,
            'module_id': self.module_id,
        }

    @classmethod
    def from_chapter(cls, chapter):
        return cls(
            title=chapter.get('title', ''),
            youtube_link=chapter.get('youtube_link', ''),
            status=chapter.get('status', 'draft'),
            module_id=chapter.get('module_id'),
            chapter_id=chapter.get('id'),
        )


def delete_module_cascade(backend, module_id):
    """Delete every chapter of a module, then the module itself"""
    backend.table(CHAPTERS_TABLE).delete({'module_id': module_id})
    backend.table(MODULES_TABLE).delete({'id': module_id})
    logger.info(f"Deleted module {module_id} and its chapters")


class CourseAdminController(ViewController):

    def __init__(self, backend, token=None):
        super().__init__(backend, token)
        self.modules = []
        self.chapters = []

    def load(self):
        self.fetch_modules()
        self.fetch_chapters()

    def fetch_modules(self):
        ok, rows = self.run(
            lambda: self.backend.table(MODULES_TABLE).select(order='title'),
            "fetching modules", failure="Failed to load modules", on_error='error'
        )
        if ok:
            self.modules = rows

    def fetch_chapters(self):
        ok, rows = self.run(
            lambda: self.backend.table(CHAPTERS_TABLE).select(order='title'),
            "fetching chapters", failure="Failed to load chapters", on_error='error'
        )
        if ok:
            self.chapters = rows

    def module_chapters(self, module_id):
        return [c for c in self.chapters if str(c.get('module_id')) == str(module_id)]

    def _validated(self, form):
        try:
            form.validate()
        except ValidationError as e:
            self.message = Message.failure(str(e))
            return False
        return True

    def save_module(self, form):
        """Create or rename a module; returns True on success"""
        self.clear_message()
        if not self._validated(form):
            return False

        table = self.backend.table(MODULES_TABLE)
        if form.module_id is not None:
            ok, _ = self.run(lambda: table.update({'id': form.module_id}, {'title': form.title}),
                             "saving module", failure="Failed to save module")
            done = "Module updated successfully"
        else:
            ok, _ = self.run(lambda: table.insert({'title': form.title}),
                             "saving module", failure="Failed to save module")
            done = "Module created successfully"
        if not ok:
            return False

        self.message = Message.success(done)
        self.fetch_modules()
        return True

    def save_chapter(self, form):
        """Create or update a chapter; returns True on success"""
        self.clear_message()
        if not self._validated(form):
            return False

        table = self.backend.table(CHAPTERS_TABLE)
        if form.chapter_id is not None:
            ok, _ = self.run(lambda: table.update({'id': form.chapter_id}, form.row()),
                             "saving chapter", failure="Failed to save chapter")
            done = "Chapter updated successfully"
        else:
            ok, _ = self.run(lambda: table.insert(form.row()),
                             "saving chapter", failure="Failed to save chapter")
            done = "Chapter created successfully"
        if not ok:
            return False

        self.message = Message.success(done)
        self.fetch_chapters()
        return True

    def delete_module(self, module_id):
        self.clear_message()
        ok, _ = self.run(lambda: delete_module_cascade(self.backend, module_id),
                         "deleting module", failure="Failed to delete module")
        if not ok:
            return False
        self.message = Message.success("Module deleted successfully")
        self.fetch_modules()
        self.fetch_chapters()
        return True

    def delete_chapter(self, chapter_id):
        self.clear_message()
        ok, _ = self.run(lambda: self.backend.table(CHAPTERS_TABLE).delete({'id': chapter_id}),
                         "deleting chapter", failure="Failed to delete chapter")
        if not ok:
            return False
        self.message = Message.success("Chapter deleted successfully")
        self.fetch_chapters()
        return True
