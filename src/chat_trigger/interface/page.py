"""Self-contained HTML page for hosted chat mode.

The page is a pure function of :class:`ChatConfiguration`: the same
configuration always renders the same document. All conversation state lives
in the browser for the lifetime of the page.
"""

import json
import re
from html import escape

from ..trigger.settings import ChatConfiguration, Feature
from . import styles

PRISM_THEME = "https://cdnjs.cloudflare.com/ajax/libs/prism/1.29.0/themes/prism-tomorrow.min.css"
MARKED_JS = "https://cdnjs.cloudflare.com/ajax/libs/marked/4.3.0/marked.min.js"
PRISM_CORE_JS = "https://cdnjs.cloudflare.com/ajax/libs/prism/1.29.0/components/prism-core.min.js"
PRISM_AUTOLOADER_JS = (
    "https://cdnjs.cloudflare.com/ajax/libs/prism/1.29.0/plugins/autoloader/prism-autoloader.min.js"
)

_PLACEHOLDER = re.compile(r"\{\{(STYLESHEETS|CSS|FILE_UPLOAD|SCRIPTS|CONFIG|SCRIPT)\}\}")

_PAGE = r"""<!DOCTYPE html>
<html>
<head>
	<title>Chat</title>
	<meta charset="UTF-8">
	<meta name="viewport" content="width=device-width, initial-scale=1.0">
{{STYLESHEETS}}
	<style>
{{CSS}}
	</style>
</head>
<body>
	<div class="chat-container">
		<div id="messages" class="messages"></div>
		<div class="input-container">
{{FILE_UPLOAD}}
			<input type="text" id="messageInput" placeholder="Type your message..." class="message-input" />
			<button id="sendButton" class="send-button">Send</button>
		</div>
	</div>
{{SCRIPTS}}
	<script>
		const chatConfig = {{CONFIG}};
{{SCRIPT}}
	</script>
</body>
</html>
"""

_FILE_UPLOAD = r"""			<div class="file-upload-container">
				<input type="file" id="fileInput" class="file-upload-input" accept="{{ACCEPT}}" multiple />
				<button type="button" id="fileButton" class="file-upload-button" title="Attach file">&#128206;</button>
				<div id="fileIndicator" class="file-indicator"></div>
			</div>"""

_SCRIPT = r"""
		const conversation = [];
		let selectedFiles = [];
		let sessionId = null;
		let threadId = null;

		function hasFeature(name) {
			return chatConfig.features.includes(name);
		}

		function escapeHtml(text) {
			const div = document.createElement('div');
			div.textContent = text;
			return div.innerHTML;
		}

		// Raw HTML in replies is shown as text; only markdown syntax renders
		if (typeof marked !== 'undefined') {
			marked.use({renderer: {html: escapeHtml}});
		}

		function renderMarkdown(content) {
			const wrapper = document.createElement('div');
			wrapper.className = 'markdown';
			wrapper.innerHTML = marked.parse(content);
			wrapper.querySelectorAll('a[href], img[src]').forEach(el => {
				const attr = el.tagName === 'A' ? 'href' : 'src';
				if (/^\s*(javascript|data|vbscript):/i.test(el.getAttribute(attr))) {
					el.removeAttribute(attr);
				}
			});
			return wrapper;
		}

		function renderContent(target, content) {
			if (hasFeature('markdown') && typeof marked !== 'undefined') {
				target.appendChild(renderMarkdown(content));
			} else {
				const text = document.createElement('div');
				text.textContent = content;
				target.appendChild(text);
			}
		}

		function addMessage(role, content, timestamp, remember) {
			const messagesDiv = document.getElementById('messages');
			const messageDiv = document.createElement('div');
			messageDiv.className = 'message ' + role;
			renderContent(messageDiv, content);

			if (hasFeature('timestamps') && timestamp) {
				const stamp = document.createElement('div');
				stamp.className = 'message-timestamp';
				stamp.textContent = new Date(timestamp).toLocaleTimeString();
				messageDiv.appendChild(stamp);
			}

			if (hasFeature('copy')) {
				const actions = document.createElement('div');
				actions.className = 'message-actions';
				const copyBtn = document.createElement('button');
				copyBtn.className = 'action-btn copy-btn';
				copyBtn.textContent = 'Copy';
				copyBtn.onclick = () => copyMessage(content);
				actions.appendChild(copyBtn);
				messageDiv.appendChild(actions);
			}

			messagesDiv.appendChild(messageDiv);
			messagesDiv.scrollTop = messagesDiv.scrollHeight;

			if (hasFeature('codeHighlight') && typeof Prism !== 'undefined') {
				Prism.highlightAllUnder(messageDiv);
			}
			if (remember) {
				conversation.push({role: role, content: content, timestamp: timestamp});
			}
		}

		function unescapeBraces(text) {
			return text.split('{{').join('{').split('}}').join('}');
		}

		function replyText(data) {
			if (typeof data === 'string') {
				return data;
			}
			const source = data && data.json ? data.json : data;
			for (const key of ['output', 'text', 'response', 'reply', 'message']) {
				if (source && typeof source[key] === 'string') {
					return unescapeBraces(source[key]);
				}
			}
			return JSON.stringify(data, null, 2);
		}

		async function sendMessage() {
			const input = document.getElementById('messageInput');
			const message = input.value.trim();
			if (!message && selectedFiles.length === 0) return;

			const sendButton = document.getElementById('sendButton');
			sendButton.disabled = true;

			const history = conversation.slice();
			if (message) {
				addMessage('user', message, new Date().toISOString(), true);
			}
			if (selectedFiles.length > 0) {
				addMessage('system', selectedFiles.length + ' file(s) attached', new Date().toISOString(), false);
			}

			const payload = {
				message: message,
				messages: history,
				sessionId: sessionId,
				threadId: threadId,
				files: selectedFiles.slice(),
			};
			input.value = '';
			clearFiles();

			try {
				const response = await fetch(window.location.href, {
					method: 'POST',
					headers: {'Content-Type': 'application/json'},
					body: JSON.stringify(payload),
				});
				if (!response.ok) {
					addMessage('system', 'Error: ' + (await response.text() || response.status), new Date().toISOString(), false);
					return;
				}
				const raw = await response.text();
				let data = raw;
				try {
					data = JSON.parse(raw);
				} catch (e) {}
				if (data && data.json) {
					sessionId = data.json.sessionId || sessionId;
					threadId = data.json.threadId || threadId;
				}
				addMessage('assistant', replyText(data), new Date().toISOString(), true);
			} catch (error) {
				console.error('Error sending message:', error);
				addMessage('system', 'Error: Connection failed', new Date().toISOString(), false);
			} finally {
				sendButton.disabled = false;
				input.focus();
			}
		}

		function copyMessage(content) {
			navigator.clipboard.writeText(content).catch(err => {
				console.error('Failed to copy message:', err);
			});
		}

		function handleFileSelect(event) {
			Array.from(event.target.files).forEach(file => {
				const reader = new FileReader();
				reader.onload = (e) => {
					selectedFiles.push({
						name: file.name,
						type: file.type,
						size: file.size,
						data: e.target.result.split(',')[1],
					});
					updateFileIndicator();
				};
				reader.readAsDataURL(file);
			});
		}

		function updateFileIndicator() {
			const indicator = document.getElementById('fileIndicator');
			if (!indicator) return;
			if (selectedFiles.length > 0) {
				indicator.textContent = selectedFiles.length;
				indicator.title = selectedFiles.map(f => f.name).join(', ');
				indicator.classList.add('show');
			} else {
				indicator.classList.remove('show');
			}
		}

		function clearFiles() {
			selectedFiles = [];
			updateFileIndicator();
			const fileInput = document.getElementById('fileInput');
			if (fileInput) fileInput.value = '';
		}

		document.addEventListener('DOMContentLoaded', function() {
			const input = document.getElementById('messageInput');
			input.addEventListener('keypress', event => {
				if (event.key === 'Enter') sendMessage();
			});
			document.getElementById('sendButton').addEventListener('click', sendMessage);

			const fileInput = document.getElementById('fileInput');
			if (fileInput) {
				fileInput.addEventListener('change', handleFileSelect);
				document.getElementById('fileButton').addEventListener('click', () => fileInput.click());
			}

			if (chatConfig.initialMessage) {
				addMessage('system', chatConfig.initialMessage, new Date().toISOString(), false);
			}
			input.focus();
		});
"""


def script_json(value) -> str:
    """JSON that is safe to inline inside a ``<script>`` element."""
    return (
        json.dumps(value)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def _stylesheet_links(config: ChatConfiguration) -> str:
    if config.has(Feature.CODE_HIGHLIGHT):
        return f'\t<link href="{PRISM_THEME}" rel="stylesheet" />'
    return ""


def _script_includes(config: ChatConfiguration) -> str:
    sources = []
    if config.has(Feature.MARKDOWN):
        sources.append(MARKED_JS)
    if config.has(Feature.CODE_HIGHLIGHT):
        sources.extend([PRISM_CORE_JS, PRISM_AUTOLOADER_JS])
    return "\n".join(f'\t<script src="{src}"></script>' for src in sources)


def uploads_enabled(config: ChatConfiguration) -> bool:
    return config.allow_file_uploads or config.has(Feature.FILE_UPLOAD)


def _file_upload_html(config: ChatConfiguration) -> str:
    if not uploads_enabled(config):
        return ""
    accept = config.allowed_file_types.strip() or "*"
    return _FILE_UPLOAD.replace("{{ACCEPT}}", escape(accept, quote=True))


def page_css(config: ChatConfiguration) -> str:
    style = config.style
    blocks = [
        styles.theme_css(style),
        styles.BODY_CSS,
        styles.container_css(style),
        styles.messages_css(style.compact_mode),
        styles.INPUT_CSS,
    ]
    if uploads_enabled(config):
        blocks.append(styles.FILE_UPLOAD_CSS)
    if config.has(Feature.COPY):
        blocks.append(styles.ACTIONS_CSS)
    if config.has(Feature.MARKDOWN):
        blocks.append(styles.MARKDOWN_CSS)
    if config.has(Feature.CODE_HIGHLIGHT):
        blocks.append(styles.CODE_HIGHLIGHT_CSS)
    if config.has(Feature.TIMESTAMPS):
        blocks.append(styles.TIMESTAMPS_CSS)
    if style.enable_animations:
        blocks.append(styles.animation_css(style.animation_speed))
    blocks.append(styles.RESPONSIVE_CSS)
    return "".join(blocks)


def render_chat_page(config: ChatConfiguration) -> str:
    client_config = {
        "features": [f.value for f in config.features],
        "displayMode": config.display_mode.value,
        "theme": config.style.theme.value,
        "enableAnimations": config.style.enable_animations,
        "initialMessage": config.initial_message,
    }
    replacements = {
        "STYLESHEETS": _stylesheet_links(config),
        "CSS": page_css(config),
        "FILE_UPLOAD": _file_upload_html(config),
        "SCRIPTS": _script_includes(config),
        "CONFIG": script_json(client_config),
        "SCRIPT": _SCRIPT,
    }
    # Single pass: substituted text is never scanned for placeholders again
    return _PLACEHOLDER.sub(lambda m: replacements[m.group(1)], _PAGE)
