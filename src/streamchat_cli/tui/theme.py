"""Theme constants and Textual CSS for the streamchat TUI.

Transparent backgrounds let the terminal's own colors show through. Color is
kept for state: amber while a reply is pending, green when idle, red for
failures.
"""

TEXT = "#d4d4d4"
TEXT_DIM = "#666666"
TEXT_MUTED = "#555555"
BORDER = "#444444"
ACCENT = "#b85ce7"
SUCCESS = "#10b981"
WARNING = "#f59e0b"
ERROR = "#ef4444"

APP_CSS = """
Screen {
    background: transparent;
    color: #d4d4d4;
}

/* ── Header ──────────────────────────────────── */

#header-bar {
    dock: top;
    height: 1;
    padding: 0 2;
    background: #1a1a1a;
}

#header-bar .header-title {
    color: #b85ce7;
    text-style: bold;
    width: 1fr;
}

#header-bar .header-hint {
    dock: right;
    width: auto;
    color: #555555;
}

/* ── Welcome banner ──────────────────────────── */

#welcome {
    width: 1fr;
    height: 1fr;
    align: center middle;
    padding: 2 4;
}

#welcome .welcome-text {
    color: #666666;
    width: auto;
    max-width: 76;
}

/* ── Message list and sections ───────────────── */

#message-list {
    height: 1fr;
    padding: 0 1;
    scrollbar-size: 1 1;
    scrollbar-background: transparent;
    scrollbar-color: #444444;
    display: none;
}

.section {
    width: 1fr;
    height: auto;
}

/* Later sections fill the viewport so a new exchange starts at the top. */
.section-anchored {
    min-height: 100vh;
    border-top: dashed #333333;
    padding-top: 1;
}

/* ── Message boxes ───────────────────────────── */

.msg-box {
    margin: 0 0 1 0;
    padding: 0 1;
    width: 1fr;
    height: auto;
}

.msg-box-reply {
    border-left: thick #444444;
    padding: 0 1;
    margin: 0 0 1 0;
    width: 1fr;
    height: auto;
}

.msg-box-reply.msg-failed {
    border-left: thick #ef4444;
}

.msg-sender {
    width: auto;
    padding: 0 1 0 0;
}

.msg-sender-user {
    color: #666666;
}

.msg-sender-reply {
    color: #d4d4d4;
    text-style: bold;
}

.msg-content {
    padding: 0;
    width: 1fr;
    height: auto;
}

.msg-content-user {
    color: #e5e5e5;
}

.msg-attachment {
    color: #888888;
    height: 1;
}

.msg-attachment-image {
    color: #b85ce7;
    height: 1;
}

/* ── Pending reply ───────────────────────────── */

.streaming-indicator {
    color: #f59e0b;
    text-style: bold;
    padding: 0 0 0 1;
}

.response-summary {
    color: #555555;
    text-style: italic;
    padding: 0 0 0 1;
    height: 1;
}

/* ── Command output ──────────────────────────── */

.cmd-output {
    border-left: thick #333333;
    margin: 0 0 1 0;
    padding: 0 1;
    height: auto;
}

.cmd-output-content {
    color: #999999;
    height: auto;
}

/* ── Input area ──────────────────────────────── */

#input-area {
    dock: bottom;
    height: auto;
    max-height: 8;
    min-height: 2;
    border-top: solid #444444;
    padding: 0 1;
}

#input-area #prompt-input {
    width: 1fr;
    min-height: 1;
    max-height: 5;
    background: transparent;
    border: none;
    color: #d4d4d4;
}

#input-area #prompt-input:focus {
    border: none;
}

#input-area #prompt-input:disabled {
    color: #555555;
}

.prompt-prefix {
    color: #666666;
    width: 2;
    padding: 0;
}

#input-row {
    height: auto;
    width: 1fr;
}

#input-area .input-hint {
    color: #555555;
    height: 1;
    padding: 0 1;
    text-align: right;
}

#attachment-bar {
    height: auto;
    padding: 0 1;
    color: #f59e0b;
}

/* ── Status bar ──────────────────────────────── */

#status-bar {
    dock: bottom;
    height: 1;
    color: #666666;
    padding: 0 2;
}

#status-bar .status-item {
    width: auto;
}

#status-bar .status-target {
    color: #d4d4d4;
}

#status-bar .status-sep {
    color: #555555;
    width: auto;
}

#status-bar .status-state {
    dock: right;
    width: auto;
}

#status-bar .state-idle {
    color: #10b981;
}

#status-bar .state-busy {
    color: #f59e0b;
}

#status-bar .state-failed {
    color: #ef4444;
}
"""
