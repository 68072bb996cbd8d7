"""
Control UI Module for Artifact Scanner

Provides a PyQt5-based control window for starting and stopping a scan.
Includes the rarity filter, live counters and worker thread communication signals.
"""

from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QLabel, QPushButton, QHBoxLayout,
    QComboBox
)
from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QFont

from artiscan.ocr.debug import get_confidence_color


BUTTON_STYLE = """
    QPushButton {{
        background-color: {base};
        color: white;
        border: none;
        border-radius: 5px;
        padding: 10px;
    }}
    QPushButton:hover {{
        background-color: {hover};
    }}
    QPushButton:pressed {{
        background-color: {pressed};
    }}
"""

START_STYLE = BUTTON_STYLE.format(base="#4CAF50", hover="#45a049", pressed="#3d8b40")
STOP_STYLE = BUTTON_STYLE.format(base="#f44336", hover="#da190b", pressed="#c41408")


class ControlWindow(QMainWindow):
    """
    Main control window for the Artifact Scanner application.

    Provides UI controls for starting/stopping a scan and displays
    progress: window, page, kept / skipped / duplicate counts.
    """

    # Signals for worker thread communication
    start_requested = pyqtSignal()
    stop_requested = pyqtSignal()
    shutdown_requested = pyqtSignal()
    min_rarity_changed = pyqtSignal(int)

    def __init__(self):
        super().__init__()
        self._is_running = False
        self._init_ui()

    def _init_ui(self):
        """Initialize the user interface components."""
        self.setWindowTitle("Artifact Scanner")
        self.setFixedSize(320, 330)
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout()
        layout.setSpacing(10)
        layout.setContentsMargins(20, 20, 20, 20)
        central_widget.setLayout(layout)

        self.status_label = QLabel("Status: Stopped")
        self.status_label.setAlignment(Qt.AlignCenter)
        status_font = QFont()
        status_font.setPointSize(10)
        status_font.setBold(True)
        self.status_label.setFont(status_font)
        layout.addWidget(self.status_label)

        layout.addSpacing(5)

        # Rarity filter
        rarity_layout = QHBoxLayout()
        rarity_label = QLabel("Min rarity:")
        rarity_label.setFont(QFont("", 9))
        rarity_layout.addWidget(rarity_label)

        self.rarity_combo = QComboBox()
        for stars in range(5, 0, -1):
            self.rarity_combo.addItem(f"{stars} star" + ("s" if stars > 1 else ""), stars)
        self.rarity_combo.currentIndexChanged.connect(self._on_rarity_changed)
        rarity_layout.addWidget(self.rarity_combo, 1)
        layout.addLayout(rarity_layout)

        layout.addSpacing(5)

        self.toggle_button = QPushButton("START SCAN")
        self.toggle_button.setMinimumHeight(50)
        button_font = QFont()
        button_font.setPointSize(11)
        button_font.setBold(True)
        self.toggle_button.setFont(button_font)
        self.toggle_button.clicked.connect(self._on_toggle_clicked)
        layout.addWidget(self.toggle_button)

        layout.addSpacing(10)

        # Info labels
        self.window_label = QLabel("Window:  Not detected")
        self.page_label = QLabel("Page:    --")
        self.kept_label = QLabel("Kept:    --")
        self.skipped_label = QLabel("Skipped: --")
        self.hint_label = QLabel("Press Esc in game to stop")

        info_font = QFont()
        info_font.setPointSize(9)

        for label in [self.window_label, self.page_label, self.kept_label,
                      self.skipped_label, self.hint_label]:
            label.setFont(info_font)
            layout.addWidget(label)

        layout.addStretch()

        self._apply_styles()

    def _apply_styles(self):
        """Apply clean, minimal styling to the window."""
        style = """
            QMainWindow {
                background-color: #f5f5f5;
            }
            QPushButton:disabled {
                background-color: #cccccc;
                color: #666666;
            }
            QLabel {
                color: #333333;
            }
        """ + START_STYLE
        self.setStyleSheet(style)

    def _on_toggle_clicked(self):
        """Handle Start/Stop button click."""
        if self._is_running:
            self.stop_requested.emit()
        else:
            self.start_requested.emit()

    def _on_rarity_changed(self, index: int):
        stars = self.rarity_combo.itemData(index)
        if stars:
            self.min_rarity_changed.emit(stars)

    def set_min_rarity(self, stars: int):
        """Select the rarity entry without emitting min_rarity_changed."""
        index = self.rarity_combo.findData(stars)
        if index >= 0:
            self.rarity_combo.blockSignals(True)
            self.rarity_combo.setCurrentIndex(index)
            self.rarity_combo.blockSignals(False)

    def set_status(self, status: str):
        """
        Update the status label.

        Args:
            status: Status text to display (e.g., "Stopped", "Scanning", "Error: message")
        """
        self.status_label.setText(f"Status: {status}")

        lowered = status.lower()
        if lowered.startswith("error") or lowered.startswith("failed"):
            self.status_label.setStyleSheet("color: #d32f2f;")
        elif lowered in ("scanning", "completed") or lowered.startswith("completed"):
            self.status_label.setStyleSheet("color: #4CAF50;")
        else:
            self.status_label.setStyleSheet("color: #333333;")

    def set_window_info(self, info: str):
        self.window_label.setText(f"Window:  {info}")

    def set_progress(self, page: int, kept: int, skipped: int, duplicates: int):
        """
        Update the counters.

        Args:
            page: Zero-based page index
            kept: Records kept after filtering
            skipped: Items skipped as unreadable
            duplicates: Cells that showed an item already seen
        """
        self.page_label.setText(f"Page:    {page + 1}")
        self.kept_label.setText(f"Kept:    {kept} ({duplicates} duplicates)")
        self.skipped_label.setText(f"Skipped: {skipped}")

        # Share of visited items that were readable
        seen = kept + skipped
        if seen:
            color = get_confidence_color(kept / seen)
            self.skipped_label.setStyleSheet(f"color: {color};")

    def set_running(self, is_running: bool):
        """
        Toggle the button state and update status.

        Args:
            is_running: True if a scan is running, False if stopped
        """
        self._is_running = is_running
        self.rarity_combo.setEnabled(not is_running)

        if is_running:
            self.toggle_button.setText("STOP SCAN")
            self.toggle_button.setStyleSheet(STOP_STYLE)
            self.set_status("Running")
            self.page_label.setText("Page:    --")
            self.kept_label.setText("Kept:    --")
            self.skipped_label.setText("Skipped: --")
            self.skipped_label.setStyleSheet("color: #333333;")
        else:
            self.toggle_button.setText("START SCAN")
            self.toggle_button.setStyleSheet(START_STYLE)

    def closeEvent(self, event):
        """
        Handle window close event.

        Emits shutdown_requested signal before closing to allow
        graceful cleanup of worker threads.

        Args:
            event: QCloseEvent object
        """
        self.shutdown_requested.emit()
        event.accept()
