from backend.image_service.prompts import compose_prompt
from backend.image_service.requests import StyleSettings


def test_bare_prompt_is_unchanged():
    assert compose_prompt("a red car") == "a red car"


def test_all_clauses_in_order():
    settings = StyleSettings(style="anime", character="a shy robot", scene="rainy Tokyo street")

    result = compose_prompt("opening shot", "neon reflections", settings)

    assert result.split("\n") == [
        "opening shot",
        "Image description: neon reflections.",
        "Style: anime.",
        "Character: a shy robot.",
        "Scene: rainy Tokyo street.",
    ]


def test_empty_clauses_are_omitted():
    settings = StyleSettings(style="realistic", character="", scene="")

    assert compose_prompt("a red car", "", settings) == "a red car\nStyle: realistic."


def test_description_without_style():
    assert compose_prompt("a red car", "parked by the sea") == (
        "a red car\nImage description: parked by the sea."
    )
