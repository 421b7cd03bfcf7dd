from artlens.app.core.app_factory import ApplicationFactory
from artlens.domains.analysis.types import Difficulty
from artlens.domains.analysis.ui.image_input import ImageInputComponent
from artlens.domains.analysis.ui.results_display import (
    DIFFICULTY_BADGES,
    STEP_NUMBER_PATTERN,
    ResultsDisplayComponent,
    swatch_html,
)


def test_step_numbers_are_stripped():
    assert STEP_NUMBER_PATTERN.sub("", "1. Prepare your canvas") == "Prepare your canvas"
    assert STEP_NUMBER_PATTERN.sub("", "12) Varnish") == "Varnish"
    assert STEP_NUMBER_PATTERN.sub("", "Mix 2 colors") == "Mix 2 colors"


def test_every_difficulty_has_badge():
    assert set(DIFFICULTY_BADGES) == set(Difficulty)


def test_swatch_escapes_color():
    rendered = swatch_html("<b>#FFF</b>")
    assert "<b>" not in rendered
    assert "&lt;b&gt;" in rendered


def test_widget_keys_are_namespaced(config):
    context = ApplicationFactory.create_application(config)

    assert ImageInputComponent(context).widget_key("cancel") == "artwork_input.cancel"
    assert ResultsDisplayComponent(context).widget_key("cancel") == "ResultsDisplayComponent.cancel"
