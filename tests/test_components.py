import pytest

from academy.course_admin import CourseAdminController, ChapterForm, ModuleForm
from academy.errors import BackendError
from streamlit_modules.ui import components


class Rerun(Exception):
    pass


@pytest.fixture
def reruns(monkeypatch):
    def rerun():
        raise Rerun()
    monkeypatch.setattr(components.st, 'rerun', rerun)


def test_failed_save_still_reruns_with_its_message(backend, reruns):
    controller = CourseAdminController(backend)

    with pytest.raises(Rerun):
        components.submit(controller.save_chapter, ChapterForm(module_id=1))

    assert controller.message.kind == 'error'
    assert controller.message.text == "All fields are required"
    assert backend.mutations() == []


def test_remote_failure_reruns_with_its_message(backend, reruns):
    controller = CourseAdminController(backend)
    backend.failures[('modules', 'insert')] = BackendError("Server error (500)", status=500)

    with pytest.raises(Rerun):
        components.submit(controller.save_module, ModuleForm(title="Stillness"))

    assert controller.message.text == "Server error (500)"


def test_successful_save_reruns(backend, reruns):
    controller = CourseAdminController(backend)

    with pytest.raises(Rerun):
        components.submit(controller.save_module, ModuleForm(title="Stillness"))

    assert controller.message.kind == 'success'
