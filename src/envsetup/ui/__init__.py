"""Prompt and confirmation collaborators for the setup workflow."""

from envsetup.ui.dialog import AutoConfirm, QuestionaryConfirm, get_dialog, render_changes
from envsetup.ui.form import PrefilledForm, QuestionaryForm, get_form

__all__ = [
    "AutoConfirm",
    "PrefilledForm",
    "QuestionaryConfirm",
    "QuestionaryForm",
    "get_dialog",
    "get_form",
    "render_changes",
]
