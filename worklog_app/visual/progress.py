"""Streamlit progress display for report runs."""

from __future__ import annotations

import streamlit as st


class ProgressReporter:
    """Status banner, progress bar and collapsible run log.

    ``callback`` matches the ReportService progress signature
    ``(message, current, total)``. Messages without a count leave the bar
    where it is; counted messages move it to ``current / total``.
    """

    def __init__(self, title: str):
        self._container = st.container()
        self._container.info(title)
        self._message = self._container.empty()
        self._bar = self._container.progress(0.0)
        self.history: list[str] = []
        self._done = False

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._done:
            return
        if current is not None and total:
            ratio = min(max(current / total, 0.0), 1.0)
            self._bar.progress(ratio)
            message = f"{message} ({current}/{total})"
        self.history.append(message)
        self._message.write(message)

    def complete(self, message: str) -> None:
        self._finish(message, failed=False)

    def error(self, message: str) -> None:
        self._finish(message, failed=True)

    def _finish(self, message: str, *, failed: bool) -> None:
        if self._done:
            return
        self._done = True
        self.history.append(message)
        if failed:
            self._container.error(message)
        else:
            self._bar.progress(1.0)
            self._container.success(message)
        with self._container.expander("Run log", expanded=failed):
            st.text("\n".join(self.history))
