"""
Tests for the application controller: state consistency, navigation side
effects, blessing, import and batch generation.
"""

import asyncio

import pytest

from src.models import (
    DEFAULT_MEMORIES,
    GenerationFailed,
    GenerationInProgress,
    GreetingStyle,
    InputValidationError,
    PersistenceError,
)
from src.session import BATCH_COMPLETE_MESSAGE, AppController, View

from conftest import FakeGateway, FakeGenerator, make_contact, make_greetings


class Harness:
    """A controller wired to fakes, with scripted confirmations."""

    def __init__(self, contacts=(), generator=None, confirm=True):
        self.gateway = FakeGateway(contacts)
        self.generator = generator or FakeGenerator()
        self.confirm_answer = confirm
        self.questions = []
        self.messages = []
        self.controller = AppController(
            gateway=self.gateway,
            generator=self.generator,
            confirm=self._confirm,
            notify=self.messages.append,
            batch_delay=0,
        )
        asyncio.run(self.controller.load())

    def _confirm(self, question):
        self.questions.append(question)
        return self.confirm_answer

    @property
    def state(self):
        return self.controller.state


def run(coro):
    return asyncio.run(coro)


# =============================================================================
# Contacts
# =============================================================================

def test_load_populates_store():
    h = Harness([make_contact("A"), make_contact("B")])
    assert h.state.store.ids() == ["id-A", "id-B"]
    assert h.state.nav.view is View.DASHBOARD


def test_add_contact_opens_memory_input():
    h = Harness()

    contact = run(h.controller.add_contact("  张三 "))

    assert contact.name == "张三"
    assert h.state.nav.view is View.MEMORY_INPUT
    assert h.state.selected == contact


def test_add_contact_rejects_blank_name():
    h = Harness()
    with pytest.raises(InputValidationError):
        run(h.controller.add_contact("   "))
    assert h.gateway.contacts == {}


def test_failed_create_leaves_state_unchanged():
    h = Harness([make_contact("A")])
    h.gateway.fail_create = True
    before = h.state

    with pytest.raises(PersistenceError):
        run(h.controller.add_contact("B"))

    assert h.state is before


def test_delete_selected_contact_returns_to_dashboard():
    h = Harness([make_contact("A", greetings=make_greetings())])
    h.controller.select_contact("id-A")
    assert h.state.nav.view is View.PREVIEW

    assert run(h.controller.delete_contact("id-A"))

    assert h.state.nav.view is View.DASHBOARD
    assert h.state.nav.selected_id is None
    assert len(h.state.store) == 0
    assert h.questions == ["Delete A?"]


def test_declined_delete_keeps_contact():
    h = Harness([make_contact("A")], confirm=False)

    assert not run(h.controller.delete_contact("id-A"))

    assert h.gateway.deleted == []
    assert "id-A" in h.state.store


# =============================================================================
# Blessing and edits
# =============================================================================

def test_copy_greeting_marks_blessed():
    h = Harness([make_contact("A", greetings=make_greetings("a"))])

    text = run(h.controller.copy_greeting("id-A", GreetingStyle.CREATIVE, 1))

    assert text == "creative 2 a"
    assert h.state.store.find("id-A").is_blessed
    assert [c.name for c in h.state.store.blessed()] == ["A"]


def test_blessing_twice_writes_once():
    h = Harness([make_contact("A", greetings=make_greetings())])

    run(h.controller.copy_greeting("id-A", GreetingStyle.FORMAL))
    run(h.controller.copy_greeting("id-A", GreetingStyle.CASUAL))

    assert len(h.gateway.update_calls) == 1


def test_copy_without_bundle_is_rejected():
    h = Harness([make_contact("A")])
    with pytest.raises(InputValidationError):
        run(h.controller.copy_greeting("id-A", GreetingStyle.FORMAL))


def test_save_greeting_text_persists_edit():
    h = Harness([make_contact("A", greetings=make_greetings())])

    run(h.controller.save_greeting_text("id-A", GreetingStyle.CASUAL, "新年快乐！"))

    assert h.state.store.find("id-A").generated_greetings.casual == "新年快乐！"
    assert h.gateway.contacts["id-A"].generated_greetings.casual == "新年快乐！"


def test_failed_edit_leaves_store_unchanged():
    h = Harness([make_contact("A", greetings=make_greetings())])
    h.gateway.fail_update = True
    before = h.state.store

    with pytest.raises(PersistenceError):
        run(h.controller.save_greeting_text("id-A", GreetingStyle.FORMAL, "改过的"))

    assert h.state.store is before


# =============================================================================
# Import
# =============================================================================

def test_import_text_creates_contacts_and_returns_to_dashboard():
    h = Harness([make_contact("A")])
    h.controller.open_import()

    created = run(h.controller.import_text("张三, 李四\n王五"))

    assert [c.name for c in created] == ["张三", "李四", "王五"]
    assert [c.name for c in h.state.store] == ["A", "张三", "李四", "王五"]
    assert h.state.nav.view is View.DASHBOARD


def test_import_image_with_no_names_stays_on_import():
    h = Harness(generator=FakeGenerator(names=[]))
    h.controller.open_import()

    created = run(h.controller.import_image(b"not really a png", "image/png"))

    assert created == []
    assert h.state.nav.view is View.IMPORT
    assert len(h.state.store) == 0


def test_cancel_import():
    h = Harness()
    h.controller.open_import()
    h.controller.cancel_import()
    assert h.state.nav.view is View.DASHBOARD


# =============================================================================
# Single generation
# =============================================================================

def test_generate_opens_preview():
    h = Harness([make_contact("A")])
    h.controller.select_contact("id-A")

    contact = run(h.controller.generate("同事", "一起加班"))

    assert contact.has_greetings
    assert h.state.nav.view is View.PREVIEW
    assert not h.state.generating


def test_generate_requires_selection():
    h = Harness([make_contact("A")])
    with pytest.raises(InputValidationError):
        run(h.controller.generate("同事", ""))


def test_generate_requires_relationship():
    h = Harness([make_contact("A")])
    h.controller.select_contact("id-A")
    with pytest.raises(InputValidationError):
        run(h.controller.generate("  ", "x"))
    assert h.generator.calls == []


def test_failed_generation_keeps_state():
    h = Harness([make_contact("A")], generator=FakeGenerator(fail_names=["A"]))
    h.controller.select_contact("id-A")
    store = h.state.store

    with pytest.raises(GenerationFailed):
        run(h.controller.generate("同事", "x"))

    assert h.state.store is store
    assert h.state.nav.view is View.MEMORY_INPUT
    assert not h.state.generating


class BlockingGenerator(FakeGenerator):
    """Holds every generation until released."""

    def __init__(self):
        super().__init__()
        self.release = None

    async def generate_greetings(self, name, relationship, memories):
        await self.release.wait()
        return await super().generate_greetings(name, relationship, memories)


def test_second_generation_is_refused_while_busy():
    generator = BlockingGenerator()
    h = Harness([make_contact("A"), make_contact("B")], generator=generator)
    h.controller.select_contact("id-A")

    async def scenario():
        generator.release = asyncio.Event()
        task = asyncio.create_task(h.controller.generate("同事", "x"))
        await asyncio.sleep(0)
        assert h.state.is_busy

        with pytest.raises(GenerationInProgress):
            await h.controller.generate("同事", "x")
        with pytest.raises(GenerationInProgress):
            await h.controller.generate_all()

        generator.release.set()
        await task

    run(scenario())

    assert [call[0] for call in generator.calls] == ["A"]
    assert not h.state.is_busy


# =============================================================================
# Batch generation
# =============================================================================

def test_generate_all_covers_pending_only():
    h = Harness([
        make_contact("A", relationship="同事"),
        make_contact("B", greetings=make_greetings()),
        make_contact("C"),
    ])
    seen = []

    final = run(h.controller.generate_all(on_progress=seen.append))

    assert [call[0] for call in h.generator.calls] == ["A", "C"]
    # Stored relationship is reused, blank memories get the default
    assert h.generator.calls[0] == ("A", "同事", DEFAULT_MEMORIES)
    assert final.processed == 2
    assert all(c.has_greetings for c in h.state.store)
    assert h.messages == [BATCH_COMPLETE_MESSAGE]
    assert seen and seen[-1].progress.current == 2
    assert not h.state.is_busy


def test_generate_all_keeps_going_after_a_failure():
    h = Harness(
        [make_contact("A"), make_contact("B"), make_contact("C")],
        generator=FakeGenerator(fail_names=["B"]),
    )

    final = run(h.controller.generate_all())

    assert final.processed == 3
    assert [f.contact_id for f in final.failures] == ["id-B"]
    assert not h.state.store.find("id-B").has_greetings
    assert h.state.store.find("id-C").has_greetings
    assert h.messages == [BATCH_COMPLETE_MESSAGE]


def test_generate_all_regenerates_everyone_when_nothing_pending():
    h = Harness([
        make_contact("A", greetings=make_greetings()),
        make_contact("B", greetings=make_greetings()),
    ])

    run(h.controller.generate_all())

    assert "Regenerate" in h.questions[0]
    assert [call[0] for call in h.generator.calls] == ["A", "B"]


def test_declined_batch_does_nothing():
    h = Harness([make_contact("A")], confirm=False)

    assert run(h.controller.generate_all()) is None

    assert h.generator.calls == []
    assert h.messages == []
    assert h.state.batch is None


def test_generate_all_with_no_contacts():
    h = Harness()
    assert run(h.controller.generate_all()) is None
    assert h.questions == []


# =============================================================================
# Notes kept across failures, dashboard copy
# =============================================================================

def test_save_inputs_keeps_notes_after_failed_generation():
    h = Harness([make_contact("A", memories="旧的")], generator=FakeGenerator(fail_names=["A"]))
    h.controller.select_contact("id-A")

    with pytest.raises(GenerationFailed):
        run(h.controller.generate("同事", "一起爬山"))
    saved = run(h.controller.save_inputs("id-A", "同事", "一起爬山"))

    assert saved.memories == "一起爬山"
    assert saved.relationship == "同事"
    assert h.state.store.find("id-A").memories == "一起爬山"
    assert h.state.nav.view is View.MEMORY_INPUT


def test_save_inputs_blank_values():
    h = Harness([make_contact("A", relationship="导师", memories="旧的")])

    saved = run(h.controller.save_inputs("id-A", " ", ""))

    assert saved.relationship == "导师"
    assert saved.memories is None


def test_copy_from_dashboard_stays_on_dashboard():
    h = Harness([make_contact("A", greetings=make_greetings("a"))])

    text = run(h.controller.copy_greeting("id-A", GreetingStyle.CASUAL))

    assert text == "casual a"
    assert h.state.nav.view is View.DASHBOARD
    assert h.state.store.find("id-A").is_blessed
