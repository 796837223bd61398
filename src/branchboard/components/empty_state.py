"""Empty / error state component.

Consistent loading and error panels for the dashboard. The error panel carries
a Retry action; the dashboard view shows it in place of the grid when the
metrics fetch fails, leaving the layout engine untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

__all__ = [
    "EmptyStateTemplate",
    "EmptyStateRegistry",
    "empty_state_registry",
    "EmptyStateWidget",
]


@dataclass(frozen=True)
class EmptyStateTemplate:
    key: str
    title: str
    description: str
    action_text: Optional[str] = None


class EmptyStateRegistry:
    """Registry holding templates for empty/error states."""

    def __init__(self):
        self._templates: Dict[str, EmptyStateTemplate] = {}
        for tpl in (
            EmptyStateTemplate(
                key="loading",
                title="Loading...",
                description="Dashboard data is being loaded; please wait.",
            ),
            EmptyStateTemplate(
                key="dashboard_error",
                title="Could Not Load Dashboard",
                description="An error occurred while loading the dashboard.",
                action_text="Retry",
            ),
        ):
            self.register(tpl)

    def register(self, template: EmptyStateTemplate) -> None:
        self._templates[template.key] = template

    def get(self, key: str) -> Optional[EmptyStateTemplate]:
        return self._templates.get(key)

    def all_keys(self):  # pragma: no cover - trivial iteration
        return list(self._templates.keys())


empty_state_registry = EmptyStateRegistry()


class EmptyStateWidget(QWidget):
    """Widget rendering one EmptyStateTemplate.

    Signals:
        actionRequested: emitted with the template key when the action button is clicked.
    """

    actionRequested = pyqtSignal(str)

    def __init__(self, template_key: str, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._template = empty_state_registry.get(template_key) or EmptyStateTemplate(
            template_key, "Unavailable", "No template found."
        )
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 8)
        self.title_label = QLabel(self._template.title)
        self.title_label.setObjectName("emptyStateTitle")
        layout.addWidget(self.title_label)
        self.desc_label = QLabel(self._template.description)
        self.desc_label.setObjectName("emptyStateDesc")
        self.desc_label.setWordWrap(True)
        layout.addWidget(self.desc_label)
        self.action_button = QPushButton(self._template.action_text or "")
        self.action_button.setObjectName("emptyStateAction")
        self.action_button.clicked.connect(  # type: ignore[attr-defined]
            lambda: self.actionRequested.emit(self._template.key)
        )
        self.action_button.setVisible(bool(self._template.action_text))
        layout.addWidget(self.action_button)
        layout.addStretch(1)

    # API --------------------------------------------------------------
    def template_key(self) -> str:
        return self._template.key

    def set_template(self, key: str, *, description: Optional[str] = None) -> None:
        tpl = empty_state_registry.get(key)
        if tpl is None:
            return
        if description:
            tpl = replace(tpl, description=description)
        self._template = tpl
        self.title_label.setText(tpl.title)
        self.desc_label.setText(tpl.description)
        self.action_button.setText(tpl.action_text or "")
        self.action_button.setVisible(bool(tpl.action_text))
