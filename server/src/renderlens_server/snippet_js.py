"""Server-served JavaScript for the instrumented page.

The resolver functions are the browser rendition of
``renderlens_client.span_resolver`` and ``renderlens_client.enclosing_token``;
the channel mirrors ``renderlens_client.channel`` on top of
``window.postMessage``.
"""

from __future__ import annotations

import json

from renderlens_shared.settings import ClientSettings

from .config import DebuggerConfig

CHANNEL_JS = r"""
function renderlensBuildChannel(targetWindow, origin, scope, onReady) {
  const handlers = {};
  const pending = {};
  const outbox = [];
  let nextId = 1;
  let ready = false;
  let destroyed = false;

  function post(payload) {
    if (destroyed || !targetWindow || targetWindow.closed) return;
    payload.scope = scope;
    targetWindow.postMessage(JSON.stringify(payload), origin);
  }

  function send(payload) {
    if (!ready) {
      outbox.push(payload);
      return;
    }
    post(payload);
  }

  function onMessage(event) {
    if (event.origin !== origin || event.source !== targetWindow) return;
    let message;
    try {
      message = JSON.parse(event.data);
    } catch (err) {
      return;
    }
    if (!message || message.scope !== scope) return;

    if (message.method === '__ready') {
      if (ready) return;
      ready = true;
      post({ method: '__ready' });
      while (outbox.length) post(outbox.shift());
      if (onReady) onReady();
      return;
    }
    if (message.method) {
      const handler = handlers[message.method];
      if (!handler) {
        post({ id: message.id, error: 'method_not_found', message: message.method });
        return;
      }
      let result;
      try {
        result = handler(message.params);
      } catch (err) {
        post({ id: message.id, error: err.name || 'Error', message: String(err) });
        return;
      }
      post({ id: message.id, result: result === undefined ? null : result });
      return;
    }
    const success = pending[message.id];
    delete pending[message.id];
    if (message.error) {
      console.warn('renderlens channel call failed', message.error, message.message);
      return;
    }
    if (success) success(message.result);
  }

  window.addEventListener('message', onMessage);
  // The peer may still be loading; repeat the handshake until it answers.
  const readyTimer = window.setInterval(function () {
    if (ready || destroyed) {
      window.clearInterval(readyTimer);
      return;
    }
    post({ method: '__ready' });
  }, 100);
  post({ method: '__ready' });

  return {
    bind: function (method, handler) {
      handlers[method] = handler;
    },
    call: function (options) {
      const id = nextId++;
      pending[id] = options.success || null;
      send({ id: id, method: options.method, params: options.params === undefined ? null : options.params });
    },
    destroy: function () {
      destroyed = true;
      window.removeEventListener('message', onMessage);
    },
  };
}
"""

RESOLVER_JS = r"""
const RENDERLENS_MARKER = /^(BEGIN|END)_(\d+)$/;

function renderlensFindMarkerPair(root, token) {
  const begin = 'BEGIN_' + token;
  const end = 'END_' + token;
  const pair = { start: null, end: null };
  (function visit(node) {
    if (node.nodeType === 8) {
      if (node.data === begin) pair.start = node;
      else if (node.data === end) pair.end = node;
    }
    const children = node.childNodes || [];
    for (let i = 0; i < children.length; i++) visit(children[i]);
  })(root);
  return pair;
}

function renderlensElementsBetween(startNode, endNode) {
  const elements = [];
  if (!startNode.parentNode || startNode.parentNode !== endNode.parentNode) return elements;
  let current = startNode.nextSibling;
  while (current && current !== endNode) {
    if (current.nodeType === 1) elements.push(current);
    current = current.nextSibling;
  }
  return elements;
}

function renderlensBuildTokenStream(root, target) {
  const stream = [];
  (function visit(node) {
    if (node.nodeType === 8 && (node.data.indexOf('BEGIN_') === 0 || node.data.indexOf('END_') === 0)) {
      stream.push(node.data);
    } else if (node === target) {
      stream.push('CURRENTNODE');
    }
    const children = node.childNodes || [];
    for (let i = 0; i < children.length; i++) visit(children[i]);
  })(root);
  return stream;
}

function renderlensIsProperlyNested(stream) {
  const open = [];
  for (let i = 0; i < stream.length; i++) {
    const match = RENDERLENS_MARKER.exec(stream[i]);
    if (!match) continue;
    if (match[1] === 'BEGIN') {
      open.push(match[2]);
    } else if (!open.length || open.pop() !== match[2]) {
      return false;
    }
  }
  return open.length === 0;
}

function renderlensEnclosingTokenInStream(stream) {
  const current = stream.indexOf('CURRENTNODE');
  if (current === -1) return null;
  for (let i = current - 1; i >= 0; i--) {
    const candidate = RENDERLENS_MARKER.exec(stream[i]);
    if (!candidate || candidate[1] !== 'BEGIN') continue;
    for (let a = current + 1; a < stream.length; a++) {
      if (stream[a] === 'END_' + candidate[2]) return parseInt(candidate[2], 10);
    }
  }
  return null;
}

function renderlensFindEnclosingToken(root, target) {
  const stream = renderlensBuildTokenStream(root, target);
  if (!renderlensIsProperlyNested(stream)) {
    console.warn('Marker stream is not properly nested; no enclosing token resolved');
    return null;
  }
  return renderlensEnclosingTokenInStream(stream);
}

function renderlensCreateHighlightState(settings) {
  const state = { highlighted: [], selected: [] };

  function category(select) {
    return select
      ? { nodes: state.selected, className: settings.selected_class }
      : { nodes: state.highlighted, className: settings.highlighted_class };
  }

  function unhighlight(select) {
    const cat = category(select);
    for (let i = 0; i < cat.nodes.length; i++) {
      cat.nodes[i].className = cat.nodes[i].className.replace(' ' + cat.className, '');
    }
    cat.nodes.length = 0;
  }

  function highlight(root, token, select) {
    unhighlight(select);
    const pair = renderlensFindMarkerPair(root, token);
    if (!pair.start || !pair.end) {
      console.warn('Start and end node could not be found', pair.start, pair.end);
      return [];
    }
    const cat = category(select);
    const elements = renderlensElementsBetween(pair.start, pair.end);
    for (let i = 0; i < elements.length; i++) {
      elements[i].className += ' ' + cat.className;
      cat.nodes.push(elements[i]);
    }
    return cat.nodes.slice();
  }

  return {
    state: state,
    highlight: highlight,
    unhighlight: unhighlight,
    clear: function () {
      unhighlight(false);
      unhighlight(true);
    },
  };
}
"""

PAGE_JS = r"""
(function (settings, evaluationTrace, debuggerUrl) {
  const windowSettings = 'status=0,toolbar=0,location=0,menubar=0,directories=0,width=1024,height=768,scrollbars=1';
  const origin = window.location.protocol + '//' + window.location.host;
  const highlights = renderlensCreateHighlightState(settings);
  let channel = null;
  let debuggerWindow = null;
  let inspectTimer = null;
  let lastTarget = null;
  let button;

  function setButtonLabel(text) {
    while (button.firstChild) button.removeChild(button.firstChild);
    button.appendChild(document.createTextNode(text));
  }

  function highlightElement(token, select) {
    highlights.highlight(document, token, select);
  }

  function activateInspectMode() {
    document.addEventListener('mousemove', mouseMoveHandler);
    document.addEventListener('click', mouseClickHandler);
  }

  function deactivateInspectMode() {
    document.removeEventListener('mousemove', mouseMoveHandler);
    document.removeEventListener('click', mouseClickHandler);
    if (inspectTimer) window.clearTimeout(inspectTimer);
    inspectTimer = null;
    lastTarget = null;
  }

  function openChannel() {
    debuggerWindow = window.open(debuggerUrl, settings.channel_scope, windowSettings);
    window.sessionStorage[settings.session_flag] = true;
    channel = renderlensBuildChannel(debuggerWindow, origin, settings.channel_scope);
    channel.bind('highlightElement', function (token) { highlightElement(token, false); });
    channel.bind('selectElement', function (token) { highlightElement(token, true); });
    channel.bind('unhighlightElements', function () { highlights.unhighlight(false); });
    channel.bind('activateInspectMode', activateInspectMode);
    channel.bind('deactivateInspectMode', deactivateInspectMode);
    channel.call({ method: 'updateEvaluationTrace', params: evaluationTrace, success: function () {} });
    activateInspectMode();
    setButtonLabel('Deactivate Debugger');
  }

  function closeChannel() {
    if (debuggerWindow) debuggerWindow.close();
    if (channel) channel.destroy();
    channel = null;
    delete window.sessionStorage[settings.session_flag];
    setButtonLabel('Activate Debugger');
    deactivateInspectMode();
    highlights.clear();
  }

  function mouseMoveHandler(e) {
    if (lastTarget === e.target) return;
    lastTarget = e.target;
    if (inspectTimer) window.clearTimeout(inspectTimer);
    inspectTimer = window.setTimeout(function () {
      inspectTimer = null;
      const token = renderlensFindEnclosingToken(document, e.target);
      if (token !== null) {
        highlightElement(token, false);
        channel.call({ method: 'highlightElement', params: token, success: function () {} });
      }
    }, settings.inspect_delay_ms);
  }

  function mouseClickHandler(e) {
    if (e.target === button) return;
    const token = renderlensFindEnclosingToken(document, e.target);
    if (token !== null) {
      highlightElement(token, true);
      channel.call({ method: 'selectElement', params: token, success: function () {} });
    }
  }

  button = document.createElement('button');
  button.className = 'renderlens-toggle';
  button.appendChild(document.createTextNode('Activate Debugger'));
  button.addEventListener('click', function () {
    if (channel) closeChannel();
    else openChannel();
  });

  const css = document.createElement('style');
  css.type = 'text/css';
  css.innerHTML = '.' + settings.highlighted_class + ' { outline: 4px solid #FFCF99; }\n'
    + '.' + settings.selected_class + ' { outline: 4px solid #FF8700; }';
  document.body.appendChild(css);
  document.body.appendChild(button);

  if (window.sessionStorage[settings.session_flag]) openChannel();

  window.renderlens = {
    findEnclosingToken: function (node) { return renderlensFindEnclosingToken(document, node); },
    highlightElement: highlightElement,
  };
})(__SETTINGS__, window.renderlensEvaluationTrace, __DEBUGGER_URL__);
"""


def settings_json(settings: ClientSettings) -> str:
    return json.dumps({
        "highlighted_class": settings.highlighted_class,
        "selected_class": settings.selected_class,
        "channel_scope": settings.channel_scope,
        "session_flag": settings.session_flag,
        "inspect_delay_ms": settings.inspect_delay_ms,
    })


def render_resolver_js() -> str:
    return RESOLVER_JS


def render_channel_js() -> str:
    return CHANNEL_JS


def render_snippet_js(config: DebuggerConfig) -> str:
    """Script loaded at the end of every instrumented page."""
    page = (
        PAGE_JS
        .replace("__SETTINGS__", settings_json(config.client))
        .replace("__DEBUGGER_URL__", json.dumps(f"{config.base_url}debugger"))
    )
    return CHANNEL_JS + RESOLVER_JS + page
