from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QStyle,
    QVBoxLayout,
    QWidget,
)

from ...browser import CreateDirectoryController, Navigator, UploadController
from ...models import Entry


class EntryRow(QFrame):
    def __init__(
        self,
        label: str,
        is_dir: bool,
        on_open: Callable[[], None],
        on_delete: Optional[Callable[[], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("entryRow")
        self.setStyleSheet(
            "#entryRow { background: #ffffff; border-radius: 6px; border: 1px solid #e6e6e6; }"
        )

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(8)

        icon = QLabel()
        pixmap = QStyle.SP_DirIcon if is_dir else QStyle.SP_FileIcon
        icon.setPixmap(self.style().standardIcon(pixmap).pixmap(16, 16))
        layout.addWidget(icon)

        open_btn = QPushButton(label)
        open_btn.setFlat(True)
        open_btn.setStyleSheet("text-align: left; color: #111111;")
        open_btn.setCursor(Qt.PointingHandCursor)
        open_btn.clicked.connect(on_open)
        layout.addWidget(open_btn, 1)

        # separate button: deleting never activates the row
        if on_delete is not None:
            delete_btn = QPushButton()
            delete_btn.setFlat(True)
            delete_btn.setToolTip("Delete")
            delete_btn.setIcon(self.style().standardIcon(QStyle.SP_TrashIcon))
            delete_btn.setCursor(Qt.PointingHandCursor)
            delete_btn.clicked.connect(on_delete)
            layout.addWidget(delete_btn, alignment=Qt.AlignRight)


class BrowserTab(QWidget):
    def __init__(self, status_cb: Optional[Callable[[str], None]] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._status = status_cb or (lambda _msg: None)
        self._nav: Optional[Navigator] = None
        self._mkdir: Optional[CreateDirectoryController] = None
        self._upload: Optional[UploadController] = None

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)

        mkdir_bar = QHBoxLayout()
        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("New directory name")
        self.name_edit.returnPressed.connect(self._submit_mkdir)
        self.mkdir_btn = QPushButton("mkdir")
        self.mkdir_btn.clicked.connect(self._submit_mkdir)
        mkdir_bar.addWidget(self.name_edit, 1)
        mkdir_bar.addWidget(self.mkdir_btn)
        root.addLayout(mkdir_bar)

        upload_bar = QHBoxLayout()
        self.file_btn = QPushButton("Choose file")
        self.file_btn.clicked.connect(self._choose_file)
        self.file_label = QLabel("No file selected")
        self.file_label.setStyleSheet("color: #666666;")
        self.upload_btn = QPushButton("upload")
        self.upload_btn.clicked.connect(self._submit_upload)
        upload_bar.addWidget(self.file_btn)
        upload_bar.addWidget(self.file_label, 1)
        upload_bar.addWidget(self.upload_btn)
        root.addLayout(upload_bar)

        self.path_label = QLabel("path: /")
        self.path_label.setStyleSheet("font-weight: 600;")
        root.addWidget(self.path_label)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        container = QWidget()
        self.list_layout = QVBoxLayout(container)
        self.list_layout.setSpacing(4)
        self.list_layout.addStretch(1)
        self.scroll.setWidget(container)
        root.addWidget(self.scroll, 1)

    def set_navigator(self, navigator: Navigator) -> None:
        self._nav = navigator
        self._mkdir = CreateDirectoryController(navigator, busy_changed=self._set_creating, created=self._on_created)
        self._upload = UploadController(navigator, busy_changed=self._set_uploading)
        navigator.on_change = self._render
        navigator.navigate_to(navigator.location)

    def show_notice(self, title: str, message: str) -> None:
        QMessageBox.information(self, title, message)

    def _render(self) -> None:
        nav = self._nav
        if nav is None:
            return
        self.path_label.setText(f"path: {nav.location}")
        self._clear_rows()
        listing = nav.listing
        if listing.location != nav.location:
            # listing for the new location not arrived yet
            return
        if nav.parent is not None:
            self._add_row(EntryRow("..", True, on_open=nav.navigate_to_parent))
        for entry in listing.entries:
            self._add_row(EntryRow(
                entry.name,
                entry.is_dir,
                on_open=lambda e=entry: self._activate(e),
                on_delete=lambda e=entry: self._delete(e),
            ))
        if nav.last_error is not None:
            self._status(f"Error: {nav.last_error}")
        else:
            self._status(f"{len(listing.dirs)} dir(s), {len(listing.files)} file(s)")

    def _add_row(self, row: EntryRow) -> None:
        self.list_layout.insertWidget(self.list_layout.count() - 1, row)

    def _clear_rows(self) -> None:
        while self.list_layout.count() > 1:
            item = self.list_layout.takeAt(0)
            widget = item.widget()
            if widget:
                widget.deleteLater()

    def _activate(self, entry: Entry) -> None:
        if entry.is_dir:
            self._nav.open(entry)
            return
        dest, _ = QFileDialog.getSaveFileName(self, "Save file as", entry.name)
        if not dest:
            return
        self._nav.open(entry, dest)
        self._status(f"Downloading {entry.path} -> {dest}")

    def _delete(self, entry: Entry) -> None:
        ok = QMessageBox.question(self, "Delete", f"Delete {entry.name}?")
        if ok != QMessageBox.StandardButton.Yes:
            return
        self._nav.actions.remove(entry)

    def _submit_mkdir(self) -> None:
        if self._mkdir is None:
            return
        self._mkdir.name = self.name_edit.text()
        self._mkdir.submit()

    def _set_creating(self, busy: bool) -> None:
        self.mkdir_btn.setEnabled(not busy)
        self.name_edit.setEnabled(not busy)

    def _on_created(self, path: str) -> None:
        self.name_edit.clear()
        self._status(f"Created {path}")

    def _choose_file(self) -> None:
        if self._upload is None:
            return
        path, _ = QFileDialog.getOpenFileName(self, "Select file to upload")
        if not path:
            return
        self._upload.file = path
        self.file_label.setText(path)

    def _submit_upload(self) -> None:
        if self._upload is not None:
            self._upload.submit()

    def _set_uploading(self, busy: bool) -> None:
        self.upload_btn.setEnabled(not busy)
        self.file_btn.setEnabled(not busy)
        self.upload_btn.setText("uploading..." if busy else "upload")
