from pydantic import BaseModel


class ViewSettings(BaseModel):
    """Which ticket card sections a user wants to see."""

    show_description: bool = True
    show_tags: bool = True
    show_internal_notes: bool = True
    show_attachments: bool = True
    show_ratings: bool = True
    show_dates: bool = True
