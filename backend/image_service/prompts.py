"""
Prompt composition for segment image generation.
"""

from typing import Optional


def compose_prompt(prompt: str, image_description: Optional[str] = None, style_settings=None) -> str:
    """
    Build the single prompt sent to the image model.

    Clauses are appended in a fixed order (description, style, character,
    scene), one per line. A clause is left out entirely when its source is
    missing or empty, so a bare prompt comes back unchanged.

    Args:
        prompt (str): The base prompt for the segment.
        image_description (str, optional): Free-text description of the image.
        style_settings (StyleSettings, optional): Style, character and scene.

    Returns:
        str: The composed prompt.
    """
    clauses = [prompt]

    if image_description:
        clauses.append(f"Image description: {image_description}.")

    if style_settings is not None:
        if style_settings.style:
            clauses.append(f"Style: {style_settings.style}.")
        if style_settings.character:
            clauses.append(f"Character: {style_settings.character}.")
        if style_settings.scene:
            clauses.append(f"Scene: {style_settings.scene}.")

    return "\n".join(clause for clause in clauses if clause)
