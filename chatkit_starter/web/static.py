"""Static assets for the host page.

This module renders the HTML page that embeds the ChatKit widget and
provides the stylesheet and the browser-side orchestrator script, along
with SRI hash generation for the script tag.
"""

from __future__ import annotations

import base64
import hashlib
import html
import json
from typing import Any

from chatkit_starter import __version__
from chatkit_starter.config.ui import ui_config_dict

APP_JS_PATH = "/static/app.js"
APP_CSS_PATH = "/static/app.css"


def get_app_css() -> str:
    """Return the host page stylesheet."""
    return """/* ChatKit starter v""" + __version__ + """ */
:root { color-scheme: light dark; }
html, body { margin: 0; height: 100%; font-family: system-ui, -apple-system, sans-serif; }
body[data-scheme="light"] { background: #f8fafc; color: #0f172a; }
body[data-scheme="dark"] { background: #0f172a; color: #f1f5f9; }
main { display: flex; flex-direction: column; align-items: center; justify-content: flex-end; min-height: 100vh; }
.chatkit-panel { position: relative; width: 100%; max-width: 48rem; height: 90vh; }
.chatkit-panel openai-chatkit { display: block; width: 100%; height: 100%; }
.chatkit-panel openai-chatkit[hidden] { display: none; }
.chatkit-overlay { position: absolute; inset: 0; display: flex; flex-direction: column; align-items: center;
  justify-content: center; gap: 1rem; text-align: center; padding: 1.5rem; }
.chatkit-overlay[hidden] { display: none; }
.chatkit-overlay button { border: none; border-radius: 9999px; padding: 0.5rem 1.25rem; cursor: pointer;
  background: #0f172a; color: #f8fafc; }
body[data-scheme="dark"] .chatkit-overlay button { background: #f1f5f9; color: #0f172a; }
.chatkit-toolbar { display: flex; justify-content: flex-end; gap: 0.5rem; width: 100%; max-width: 48rem; padding: 0.5rem; }
"""


def get_app_js() -> str:
    """Return the browser-side session orchestrator and widget host.

    Mirrors :class:`chatkit_starter.web.orchestrator.SessionOrchestrator`:
    script readiness by load event or registry polling, one credential per
    widget instance, three error flags, fact deduplication, and a liveness
    flag so late responses after teardown are ignored.
    """
    return """/* ChatKit starter v""" + __version__ + """ */
(function (window, document) {
  'use strict';

  var ELEMENT = 'openai-chatkit';
  var SCRIPT_TIMEOUT_MS = 5000;
  var POLL_INTERVAL_MS = 100;
  var SCHEME_KEY = 'chatkit-color-scheme';
  var PLACEHOLDER_PREFIXES = ['wf_replace', 'wf_your'];

  var config = JSON.parse(document.getElementById('chatkit-config').textContent);

  function isPlaceholder(id) {
    var value = (id || '').trim().toLowerCase();
    if (!value || value === 'wf_placeholder') return true;
    return PLACEHOLDER_PREFIXES.some(function (p) { return value.indexOf(p) === 0; });
  }

  // --- color scheme preference ---

  function preferredScheme() {
    var stored = null;
    try { stored = window.localStorage.getItem(SCHEME_KEY); } catch (e) { stored = null; }
    if (stored === 'light' || stored === 'dark') return stored;
    return window.matchMedia && window.matchMedia('(prefers-color-scheme: dark)').matches ? 'dark' : 'light';
  }

  function applyScheme(scheme) {
    document.body.setAttribute('data-scheme', scheme);
    try { window.localStorage.setItem(SCHEME_KEY, scheme); } catch (e) { /* storage unavailable */ }
  }

  // --- widget host ---

  function waitForWidget() {
    return new Promise(function (resolve, reject) {
      if (window.customElements && window.customElements.get(ELEMENT)) { resolve(); return; }
      var done = false;
      function finish(err) {
        if (done) return;
        done = true;
        window.clearInterval(poll);
        window.clearTimeout(timer);
        window.removeEventListener('chatkit-script-loaded', onLoad);
        window.removeEventListener('chatkit-script-error', onError);
        if (err) { reject(err); } else { resolve(); }
      }
      function onLoad() { if (window.customElements.get(ELEMENT)) finish(); }
      function onError() { finish(new Error('Failed to load the ChatKit script. Check your network and the script URL.')); }
      var poll = window.setInterval(function () {
        if (window.customElements && window.customElements.get(ELEMENT)) finish();
      }, POLL_INTERVAL_MS);
      var timer = window.setTimeout(function () {
        finish(new Error('ChatKit web component is unavailable. Verify that the script URL is reachable.'));
      }, SCRIPT_TIMEOUT_MS);
      window.addEventListener('chatkit-script-loaded', onLoad);
      window.addEventListener('chatkit-script-error', onError);
    });
  }

  function buildOptions(scheme) {
    var theme = Object.assign({ colorScheme: scheme }, config.themes[scheme]);
    return {
      api: { getClientSecret: getClientSecret },
      theme: theme,
      startScreen: { greeting: config.greeting, prompts: config.starterPrompts },
      composer: { placeholder: config.placeholder, attachments: { enabled: true } },
      threadItemActions: { feedback: false },
      onClientTool: handleClientTool
    };
  }

  // --- orchestrator state ---

  var state = {
    live: true,
    scheme: preferredScheme(),
    instanceKey: 0,
    initializing: true,
    errors: { script: null, session: null, integration: null, retryable: false },
    seenFacts: {}
  };

  var panel = document.getElementById('chatkit-panel');
  var overlay = document.getElementById('chatkit-overlay');
  var overlayMessage = document.getElementById('chatkit-overlay-message');
  var retryButton = document.getElementById('chatkit-retry');
  var widget = null;

  function render() {
    var blocking = state.errors.script || state.errors.session;
    if (blocking) {
      overlayMessage.textContent = blocking;
      retryButton.hidden = !state.errors.retryable;
      overlay.hidden = false;
    } else if (state.initializing) {
      overlayMessage.textContent = 'Loading assistant session...';
      retryButton.hidden = true;
      overlay.hidden = false;
    } else {
      overlay.hidden = true;
    }
    if (widget) widget.hidden = Boolean(blocking);
  }

  function setErrors(patch) {
    if (!state.live) return;
    Object.assign(state.errors, patch);
    render();
  }

  function getClientSecret(currentSecret) {
    if (isPlaceholder(config.workflowId)) {
      setErrors({ session: 'Set CHATKIT_WORKFLOW_ID in your .env file.', retryable: false });
      state.initializing = false;
      render();
      return Promise.reject(new Error('Missing workflow id'));
    }
    if (state.live && !currentSecret) {
      state.initializing = true;
      setErrors({ session: null, integration: null, retryable: false });
    }
    return window.fetch(config.createSessionEndpoint, {
      method: 'POST',
      credentials: 'same-origin',
      headers: { 'Content-Type': 'application/json' },
      body: JSON.stringify({
        workflow: { id: config.workflowId },
        chatkit_configuration: { file_upload: { enabled: true } }
      })
    }).then(function (response) {
      return response.json().catch(function () { return {}; }).then(function (data) {
        if (!response.ok) throw new Error(data.error || 'Failed to create session');
        if (!data.client_secret) throw new Error('Missing client secret in response');
        if (state.live) {
          state.initializing = false;
          render();
        }
        return data.client_secret;
      });
    }).catch(function (err) {
      setErrors({ session: err.message || 'Unable to start ChatKit session.', retryable: true });
      if (state.live) { state.initializing = false; render(); }
      throw err;
    });
  }

  function handleClientTool(invocation) {
    var params = invocation.params || {};
    if (invocation.name === 'switch_theme') {
      if (params.theme === 'light' || params.theme === 'dark') {
        switchScheme(params.theme);
        return { success: true };
      }
      return { success: false };
    }
    if (invocation.name === 'record_fact') {
      var id = String(params.fact_id || '');
      if (!id) return { success: false };
      if (state.seenFacts[id]) return { success: true };
      state.seenFacts[id] = true;
      window.dispatchEvent(new CustomEvent('chatkit-fact-recorded', {
        detail: { type: 'save', factId: id, factText: String(params.fact_text || '').replace(/\\s+/g, ' ') }
      }));
      return { success: true };
    }
    return { success: false };
  }

  function switchScheme(scheme) {
    state.scheme = scheme;
    applyScheme(scheme);
    if (widget && typeof widget.setOptions === 'function') widget.setOptions(buildOptions(scheme));
  }

  function mountWidget() {
    if (!state.live) return;
    if (widget) widget.remove();
    widget = document.createElement(ELEMENT);
    widget.setAttribute('data-instance-key', String(state.instanceKey));
    widget.addEventListener('chatkit.error', function (event) {
      var detail = event.detail || {};
      if (state.live) state.errors.integration = String(detail.error || 'ChatKit error');
    });
    widget.addEventListener('chatkit.thread.change', function () { state.seenFacts = {}; });
    panel.appendChild(widget);
    widget.setOptions(buildOptions(state.scheme));
    render();
  }

  function start() {
    render();
    return waitForWidget().then(function () {
      if (!state.live) return;
      setErrors({ script: null });
      mountWidget();
    }, function (err) {
      state.initializing = false;
      setErrors({ script: err.message, retryable: true });
    });
  }

  // A failed <script> element never loads again; retrying needs a fresh one.
  function reloadScript() {
    var previous = document.getElementById('chatkit-script');
    if (!previous) return;
    var script = document.createElement('script');
    script.id = 'chatkit-script';
    script.async = true;
    script.onload = function () { window.dispatchEvent(new Event('chatkit-script-loaded')); };
    script.onerror = function () {
      window.dispatchEvent(new CustomEvent('chatkit-script-error', { detail: script.src }));
    };
    script.src = previous.src;
    previous.parentNode.replaceChild(script, previous);
  }

  function resetChat() {
    if (state.errors.script) reloadScript();
    state.instanceKey += 1;
    state.errors = { script: null, session: null, integration: null, retryable: false };
    state.seenFacts = {};
    state.initializing = true;
    return start();
  }

  retryButton.addEventListener('click', function () { resetChat(); });
  var resetButton = document.getElementById('chatkit-reset');
  if (resetButton) resetButton.addEventListener('click', function () { resetChat(); });
  var schemeButton = document.getElementById('chatkit-scheme');
  if (schemeButton) schemeButton.addEventListener('click', function () {
    switchScheme(state.scheme === 'dark' ? 'light' : 'dark');
  });
  window.addEventListener('pagehide', function () { state.live = false; });

  applyScheme(state.scheme);
  start();

})(window, document);
"""


def get_sri_hash(content: str) -> str:
    """Generate SRI (Subresource Integrity) hash for content.

    Returns:
        SRI hash string in format "sha384-{base64_hash}".
    """
    content_bytes = content.encode("utf-8")
    hash_bytes = hashlib.sha384(content_bytes).digest()
    hash_b64 = base64.b64encode(hash_bytes).decode("utf-8")
    return f"sha384-{hash_b64}"


def _config_json(workflow_id: str) -> str:
    data: dict[str, Any] = {**ui_config_dict(), "workflowId": workflow_id}
    # Keep the JSON from closing the surrounding <script> element.
    return json.dumps(data).replace("</", "<\\/")


def render_page(script_url: str, workflow_id: str) -> str:
    """Render the host page that loads the widget script and the orchestrator.

    Args:
        script_url: URL of the ChatKit web component script.
        workflow_id: Public workflow id embedded in the page configuration.
    """
    script_src = html.escape(script_url, quote=True)
    integrity = get_sri_hash(get_app_js())
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>AgentKit demo</title>
  <link rel="stylesheet" href="{APP_CSS_PATH}">
  <script id="chatkit-script" src="{script_src}" async
    onload="window.dispatchEvent(new Event('chatkit-script-loaded'))"
    onerror="window.dispatchEvent(new CustomEvent('chatkit-script-error', {{detail: this.src}}))"></script>
</head>
<body data-scheme="light">
  <main>
    <div class="chatkit-toolbar">
      <button type="button" id="chatkit-scheme">Toggle theme</button>
      <button type="button" id="chatkit-reset">New chat</button>
    </div>
    <div class="chatkit-panel" id="chatkit-panel">
      <div class="chatkit-overlay" id="chatkit-overlay" role="status">
        <p id="chatkit-overlay-message">Loading assistant session...</p>
        <button type="button" id="chatkit-retry" hidden>Restart chat</button>
      </div>
    </div>
  </main>
  <script id="chatkit-config" type="application/json">{_config_json(workflow_id)}</script>
  <script src="{APP_JS_PATH}" integrity="{integrity}"></script>
</body>
</html>
"""
