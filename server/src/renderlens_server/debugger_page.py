"""The observer view: a detached page showing the evaluation tree."""

from __future__ import annotations

import html
import json

from .config import DebuggerConfig
from .output_formatter import output_css
from .snippet_js import CHANNEL_JS, settings_json

DEBUGGER_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>__TITLE__</title>
    <style>
        body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; display: flex; }
        .tree { width: 45%; overflow: auto; height: 100vh; border-right: 1px solid #ddd; padding: 10px; }
        .tree ul { list-style: none; padding-left: 16px; margin: 0; }
        .tree li > span { cursor: pointer; }
        .tree .object-type { color: #888; }
        .highlighted { background-color: #FFCF99; }
        .selected { background-color: #FF8700; }
        .same-context { text-decoration: underline; }
        .details { flex: 1; padding: 10px; overflow: auto; height: 100vh; }
        .details pre { background-color: #f8f8f8; padding: 10px; white-space: pre-wrap; }
        .status { display: inline-block; width: 10px; height: 10px; border-radius: 5px; background: #ccc; }
        .status.label-success { background: #2E7D32; }
        .inspect-page.active { background-color: #1565C0; color: white; }
        __OUTPUT_CSS__
    </style>
</head>
<body>
    <div class="tree">
        <div><span class="status"></span> <button class="inspect-page active">Inspect page</button></div>
        <div class="evaluation-tree"></div>
    </div>
    <div class="details" data-arraypath="">
        <div class="details-content"></div>
        <h3>Expression</h3>
        <input id="expression" type="text" size="60">
        <button id="expression-evaluate">Evaluate</button>
        <pre id="expression-result"></pre>
    </div>
    <script>__DEBUGGER_JS__</script>
</body>
</html>
"""

DEBUGGER_JS = r"""
(function (settings, parameters) {
  let channel = null;
  let evaluationTrace = {};

  function nodeAt(arrayPath) {
    const segment = /\.children\[(\d+)\]/g;
    let node = evaluationTrace;
    let match;
    while ((match = segment.exec(arrayPath)) !== null) {
      node = (node.children || [])[parseInt(match[1], 10)];
      if (!node) return null;
    }
    return node;
  }

  function escapeHtml(text) {
    const div = document.createElement('div');
    div.appendChild(document.createTextNode(text === null || text === undefined ? '' : String(text)));
    return div.innerHTML;
  }

  function renderTree(node, arrayPath) {
    let label = escapeHtml(node.relativePath || node.fullPath || '');
    if (node.objectType) label += ' <span class="object-type">' + escapeHtml(node.objectType) + '</span>';
    let markup = '<li><span data-arraypath="' + arrayPath + '" data-token="'
      + (node.token === null || node.token === undefined ? '' : node.token) + '">' + label + '</span>';
    const children = node.children || [];
    if (children.length) {
      markup += '<ul>';
      for (let i = 0; i < children.length; i++) {
        markup += renderTree(children[i], arrayPath + '.children[' + i + ']');
      }
      markup += '</ul>';
    }
    return markup + '</li>';
  }

  function renderDetails(node) {
    let markup = '<h2>' + escapeHtml(node.condensedPath || node.fullPath) + '</h2>';
    markup += '<p>Type: ' + escapeHtml(node.objectType) + '</p>';
    markup += '<h3 class="context">Context</h3><ul class="context">';
    const context = node.contextAsString || {};
    for (const key in context) {
      markup += '<li><b>' + escapeHtml(key) + '</b>: ' + escapeHtml(context[key]) + '</li>';
    }
    markup += '</ul><h3>Output</h3><div class="output"><pre>' + escapeHtml(node.output) + '</pre></div>';
    return markup;
  }

  function highlightOutput(details, output) {
    if (!window.fetch) return;
    fetch(parameters.formatOutputUrl, {
      method: 'POST',
      headers: { 'Content-Type': 'application/json' },
      body: JSON.stringify({ output: output || '' })
    })
      .then(function (response) { return response.ok ? response.json() : null; })
      .then(function (payload) {
        const target = details.querySelector('.output');
        if (payload && target) target.innerHTML = payload.html;
      })
      .catch(function () {});
  }

  function tree() {
    return document.querySelector('.evaluation-tree');
  }

  function clearClass(className) {
    const marked = document.querySelectorAll('.' + className);
    for (let i = 0; i < marked.length; i++) marked[i].classList.remove(className);
  }

  function highlightTreeNode(element, sendToPage, select) {
    if (!element) return;
    const className = select ? 'selected' : 'highlighted';
    clearClass(className);
    element.classList.add(className);
    const arrayPath = element.getAttribute('data-arraypath');
    const node = nodeAt(arrayPath);
    if (!node) return;
    const details = document.querySelector('.details');
    details.querySelector('.details-content').innerHTML = renderDetails(node);
    details.setAttribute('data-arraypath', arrayPath);
    highlightOutput(details, node.output);
    if (sendToPage && channel && node.token !== null && node.token !== undefined) {
      channel.call({ method: select ? 'selectElement' : 'highlightElement', params: node.token, success: function () {} });
    }
  }

  function treeNodeForToken(token) {
    return tree().querySelector('[data-token="' + token + '"]');
  }

  if (window.opener) {
    channel = renderlensBuildChannel(
      window.opener,
      window.location.protocol + '//' + window.location.host,
      settings.channel_scope,
      function () { document.querySelector('.status').classList.add('label-success'); }
    );
    channel.bind('highlightElement', function (token) { highlightTreeNode(treeNodeForToken(token), false, false); });
    channel.bind('selectElement', function (token) { highlightTreeNode(treeNodeForToken(token), false, true); });
    channel.bind('updateEvaluationTrace', function (evaluationTraceAsString) {
      evaluationTrace = JSON.parse(evaluationTraceAsString);
      tree().innerHTML = '<ul>' + renderTree(evaluationTrace, '') + '</ul>';
    });
  }

  tree().addEventListener('mouseover', function (e) {
    const label = e.target.closest('li > span');
    if (label) highlightTreeNode(label, true, false);
  });
  tree().addEventListener('mouseout', function (e) {
    if (!e.target.closest('li > span')) return;
    clearClass('highlighted');
    const selected = document.querySelector('.selected');
    if (selected) highlightTreeNode(selected, false, true);
    if (channel) channel.call({ method: 'unhighlightElements', success: function () {} });
  });
  tree().addEventListener('click', function (e) {
    const label = e.target.closest('li > span');
    if (!label) return;
    e.stopPropagation();
    highlightTreeNode(label, true, true);
  });

  function markSameContext(node) {
    clearClass('same-context');
    const expected = JSON.stringify(node.contextAsString || {});
    const spans = tree().querySelectorAll('li > span');
    for (let i = 0; i < spans.length; i++) {
      const candidate = nodeAt(spans[i].getAttribute('data-arraypath'));
      if (candidate && JSON.stringify(candidate.contextAsString || {}) === expected) {
        spans[i].classList.add('same-context');
      }
    }
  }

  const details = document.querySelector('.details');
  details.addEventListener('mouseover', function (e) {
    if (!e.target.closest('.context')) return;
    const node = nodeAt(details.getAttribute('data-arraypath'));
    if (node) markSameContext(node);
  });
  details.addEventListener('mouseout', function (e) {
    if (e.target.closest('.context')) clearClass('same-context');
  });

  document.querySelector('.inspect-page').addEventListener('click', function () {
    const active = this.classList.contains('active');
    if (channel) channel.call({ method: active ? 'deactivateInspectMode' : 'activateInspectMode', success: function () {} });
    if (!active && window.opener) window.opener.focus();
    this.classList.toggle('active');
  });

  document.getElementById('expression-evaluate').addEventListener('click', function () {
    const form = new URLSearchParams();
    form.append(parameters.expression, document.getElementById('expression').value);
    form.append(parameters.arrayPath, document.querySelector('.details').getAttribute('data-arraypath'));
    const pageUrl = window.opener ? window.opener.location.href : window.location.href;
    fetch(pageUrl, { method: 'POST', body: form })
      .then(function (response) { return response.text(); })
      .then(function (text) { document.getElementById('expression-result').textContent = text; });
  });
})(__SETTINGS__, __PARAMETERS__);
"""


def render_debugger_js(config: DebuggerConfig) -> str:
    parameters = json.dumps({
        "expression": config.expression_parameter,
        "arrayPath": config.array_path_parameter,
        "formatOutputUrl": config.base_url + "api/format-output",
    })
    return CHANNEL_JS + (
        DEBUGGER_JS
        .replace("__SETTINGS__", settings_json(config.client))
        .replace("__PARAMETERS__", parameters)
    )


def render_debugger_page(config: DebuggerConfig, title: str = "renderlens debugger") -> str:
    return (
        DEBUGGER_PAGE_TEMPLATE
        .replace("__TITLE__", html.escape(title))
        .replace("__OUTPUT_CSS__", output_css())
        .replace("__DEBUGGER_JS__", render_debugger_js(config))
    )
