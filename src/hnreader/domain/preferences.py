"""Reader preferences record."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from hnreader.domain.summary import SummaryModel
from hnreader.domain.translation import TranslationStyle


class Theme(StrEnum):
    """Display theme."""

    LIGHT = "light"
    DARK = "dark"


class ReaderPreferences(BaseModel):
    """User-editable reader settings. Replaced whole on every change."""

    model_config = ConfigDict(frozen=True)

    translation_style: TranslationStyle = TranslationStyle.TECH
    summary_model: SummaryModel = SummaryModel.FAST
    theme: Theme = Theme.LIGHT
