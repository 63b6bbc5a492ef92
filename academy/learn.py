"""
Learn page: pick a module, watch its live chapters.
"""
import logging

from .views import ViewController
from .video import embed_url

logger = logging.getLogger(__name__)

MODULES_TABLE = 'modules'
CHAPTERS_TABLE = 'chapters'
LIVE = 'live'


def same_id(a, b):
    return a is not None and b is not None and str(a) == str(b)


class LearnController(ViewController):

    def __init__(self, backend, token=None):
        super().__init__(backend, token)
        self.modules = []
        self.selected_module = None
        self.chapters = []
        self.selected_chapter = None

    def load(self):
        """Fetch modules, select the first one and fetch its chapters"""
        ok, rows = self.run(
            lambda: self.backend.table(MODULES_TABLE).select(order='title'),
            "fetching modules", failure="Failed to load modules", on_error='error'
        )
        if not ok:
            return
        self.modules = rows
        if rows and self.selected_module is None:
            self.selected_module = rows[0]
        if self.selected_module is not None:
            self.fetch_chapters(self.selected_module['id'])

    def fetch_chapters(self, module_id):
        ok, rows = self.run(
            lambda: self.backend.table(CHAPTERS_TABLE).select(
                {'module_id': module_id, 'status': LIVE}, order='title'
            ),
            f"fetching chapters of module {module_id}", on_error=None
        )
        # Another module may have been selected while this request was in flight
        current = self.selected_module['id'] if self.selected_module else None
        if not same_id(current, module_id):
            logger.info(f"Dropping chapters of module {module_id}, module {current} is selected")
            return
        if not ok:
            if not self.closed:
                self.error = "Failed to load chapters"
            return
        self.chapters = rows
        self.selected_chapter = rows[0] if rows else None

    def select_module(self, module_id):
        module = next((m for m in self.modules if same_id(m['id'], module_id)), None)
        if module is None:
            return
        self.selected_module = module
        self.chapters = []
        self.selected_chapter = None
        self.fetch_chapters(module['id'])

    def select_chapter(self, chapter_id):
        chapter = next((c for c in self.chapters if same_id(c['id'], chapter_id)), None)
        if chapter is not None:
            self.selected_chapter = chapter

    @property
    def video_url(self):
        if self.selected_chapter is None:
            return None
        return embed_url(self.selected_chapter.get('youtube_link'))

    @property
    def empty_text(self):
        if not self.chapters:
            return "No chapters available for this module"
        return "Select a chapter to start learning"
