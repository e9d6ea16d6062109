"""Accessible main window for Preview Unblock.

Built with wxPython for native screen-reader support (VoiceOver on macOS,
JAWS/NVDA on Windows).  All controls have explicit accessible names and
a logical tab order.  The window only renders state; every action is
delegated to the :class:`~preview_unblock.app.App` controller.
"""

import logging
from typing import TYPE_CHECKING

import wx

from preview_unblock import __app_name__
from preview_unblock.config import PDF_SUFFIX
from preview_unblock.platform_utils import get_log_path, open_file_in_default_app

if TYPE_CHECKING:
    from preview_unblock.app import App

logger = logging.getLogger(__name__)

# ---- Accessible colour palette (WCAG 2.2 AA contrast >= 4.5:1) ----
SUCCESS_FG = wx.Colour(10, 110, 10)

_AGREEMENT_TEXT = (
    "I understand that removing the download marker disables the security "
    f"warning for {PDF_SUFFIX} files in this folder."
)


class MainWindow:
    """Folder picker, start/stop control, status line and activity log."""

    def __init__(self, app: "App"):
        """Create the main window (hidden until ``show`` is called)."""
        self._app = app
        self._win: wx.Frame | None = None
        self._folder_ctrl: wx.TextCtrl | None = None
        self._agree_cb: wx.CheckBox | None = None
        self._start_btn: wx.Button | None = None
        self._status_label: wx.StaticText | None = None
        self._log_ctrl: wx.TextCtrl | None = None

    def show(self) -> None:
        """Show or focus the main window."""
        if self._win is not None:
            self._win.Raise()
            self._win.SetFocus()
            return
        self._build()

    def _build(self) -> None:
        self._win = wx.Frame(
            None,
            title=__app_name__,
            size=(720, 520),
            style=wx.DEFAULT_FRAME_STYLE,
        )
        self._win.SetMinSize((560, 400))
        self._win.Bind(wx.EVT_CLOSE, self._on_close_event)

        panel = wx.Panel(self._win)
        main_sizer = wx.BoxSizer(wx.VERTICAL)

        # ---- Folder ----
        folder_sizer = wx.BoxSizer(wx.HORIZONTAL)
        lbl = wx.StaticText(panel, label="Monitored folder:")
        folder_sizer.Add(lbl, flag=wx.ALIGN_CENTER_VERTICAL | wx.RIGHT, border=5)
        self._folder_ctrl = wx.TextCtrl(
            panel, value=self._app.folder, style=wx.TE_READONLY
        )
        self._folder_ctrl.SetName("Monitored folder")
        folder_sizer.Add(self._folder_ctrl, proportion=1, flag=wx.EXPAND | wx.RIGHT, border=5)
        change_btn = wx.Button(panel, label="Change Folder\u2026")
        change_btn.Bind(wx.EVT_BUTTON, self._on_browse)
        folder_sizer.Add(change_btn)
        main_sizer.Add(folder_sizer, flag=wx.EXPAND | wx.ALL, border=10)

        # ---- Agreement gate ----
        self._agree_cb = wx.CheckBox(panel, label=_AGREEMENT_TEXT)
        self._agree_cb.SetName("Agreement")
        self._agree_cb.Bind(wx.EVT_CHECKBOX, self._on_agree)
        main_sizer.Add(self._agree_cb, flag=wx.LEFT | wx.RIGHT | wx.BOTTOM, border=10)

        # ---- Start/Stop + status ----
        ctrl_sizer = wx.BoxSizer(wx.HORIZONTAL)
        self._start_btn = wx.Button(panel, label="Start")
        self._start_btn.Enable(False)
        self._start_btn.Bind(wx.EVT_BUTTON, lambda e: self._app.on_toggle_monitoring())
        ctrl_sizer.Add(self._start_btn, flag=wx.RIGHT, border=10)

        self._status_label = wx.StaticText(panel, label=self._app.session.status_text())
        self._status_label.SetName("Monitoring status")
        ctrl_sizer.Add(self._status_label, flag=wx.ALIGN_CENTER_VERTICAL)
        main_sizer.Add(ctrl_sizer, flag=wx.LEFT | wx.RIGHT | wx.BOTTOM, border=10)

        # ---- Activity log ----
        log_label = wx.StaticText(panel, label="Activity:")
        main_sizer.Add(log_label, flag=wx.LEFT | wx.RIGHT, border=10)
        self._log_ctrl = wx.TextCtrl(
            panel,
            style=wx.TE_MULTILINE | wx.TE_READONLY | wx.TE_RICH2 | wx.HSCROLL,
        )
        self._log_ctrl.SetName("Activity log")
        for line in self._app.session.activity.lines:
            self._log_ctrl.AppendText(line + "\n")
        main_sizer.Add(
            self._log_ctrl,
            proportion=1,
            flag=wx.EXPAND | wx.LEFT | wx.RIGHT | wx.BOTTOM,
            border=10,
        )

        # ---- Buttons ----
        btn_sizer = wx.BoxSizer(wx.HORIZONTAL)
        log_btn = wx.Button(panel, label="View Log File")
        log_btn.Bind(wx.EVT_BUTTON, self._on_open_log)
        btn_sizer.Add(log_btn, flag=wx.RIGHT, border=8)
        close_btn = wx.Button(panel, label="Exit")
        close_btn.Bind(wx.EVT_BUTTON, lambda e: self._win.Close() if self._win else None)
        btn_sizer.Add(close_btn)
        main_sizer.Add(btn_sizer, flag=wx.ALIGN_CENTER_HORIZONTAL | wx.BOTTOM, border=10)

        panel.SetSizer(main_sizer)
        self._win.Show()
        wx.CallAfter(self._win.Raise)

    # ---- rendering (UI thread only) ----

    def append_log(self, line: str) -> None:
        """Append one activity line, trimming the oldest past the limit."""
        if not self._log_ctrl:
            return
        self._log_ctrl.AppendText(line + "\n")
        excess = self._log_ctrl.GetNumberOfLines() - self._app.config.max_log_lines - 1
        if excess > 0:
            end = self._log_ctrl.XYToPosition(0, excess)
            self._log_ctrl.Remove(0, end)
        self._log_ctrl.ShowPosition(self._log_ctrl.GetLastPosition())

    def set_status(self, text: str, running: bool) -> None:
        """Update the status label and the Start/Stop caption."""
        if self._status_label:
            self._status_label.SetLabel(text)
            self._status_label.SetForegroundColour(
                SUCCESS_FG
                if running
                else wx.SystemSettings.GetColour(wx.SYS_COLOUR_WINDOWTEXT)
            )
        if self._start_btn:
            self._start_btn.SetLabel("Stop" if running else "Start")

    def set_folder(self, folder: str) -> None:
        if self._folder_ctrl:
            self._folder_ctrl.SetValue(folder)

    def show_error(self, message: str) -> None:
        wx.MessageBox(message, "Error", wx.OK | wx.ICON_ERROR, self._win)

    def confirm(self, message: str, title: str) -> bool:
        answer = wx.MessageBox(message, title, wx.YES_NO | wx.ICON_QUESTION, self._win)
        return answer == wx.YES

    # ---- events ----

    def _on_agree(self, event: wx.CommandEvent) -> None:
        if self._start_btn and self._agree_cb:
            self._start_btn.Enable(self._agree_cb.GetValue())

    def _on_browse(self, event: wx.CommandEvent) -> None:
        dlg = wx.DirDialog(
            self._win,
            "Select folder to monitor for PDF files.",
            defaultPath=self._app.folder or "",
        )
        if dlg.ShowModal() == wx.ID_OK:
            self._app.on_change_folder(dlg.GetPath())
        dlg.Destroy()

    def _on_open_log(self, event: wx.CommandEvent) -> None:
        """Open the diagnostic log file in the default text editor."""
        log_path = get_log_path()
        if log_path.exists():
            open_file_in_default_app(log_path)
        else:
            wx.MessageBox(
                "No log file exists yet.",
                "Log File",
                wx.OK | wx.ICON_INFORMATION,
                self._win,
            )

    def destroy(self) -> None:
        """Tear the window down; ends the main loop."""
        if self._win:
            self._win.Destroy()
            self._win = None

    def _on_close_event(self, event: wx.CloseEvent) -> None:
        if event.CanVeto() and not self._app.confirm_exit():
            event.Veto()
            return
        # Hidden now, destroyed by the app once the session has stopped.
        if self._win:
            self._win.Hide()
        self._app.on_quit()
