"""
In-Page Scripts
===============

JavaScript functions evaluated inside the captured page. Each constant is a
function expression; Playwright passes the single argument through.

All geometry is returned as document-relative CSS pixels.
"""

QUERY_ALL = """
(selector) => Array.from(document.querySelectorAll(selector))
"""

TOP_LEVEL_FLAGS = """
({ elements, selector }) => elements.map((el) => {
  const parent = el.parentElement;
  return !(parent && parent.closest(selector));
})
"""

ELEMENT_BOX = """
(el) => {
  if (!el || !el.isConnected) return null;
  const r = el.getBoundingClientRect();
  if (!(r.width > 0) || !(r.height > 0)) return null;
  return { x: r.left + window.scrollX, y: r.top + window.scrollY, width: r.width, height: r.height };
}
"""

SCROLL_INTO_VIEW = """
(el) => {
  if (el && el.isConnected) el.scrollIntoView({ block: 'center', inline: 'nearest' });
}
"""

DOCUMENT_SIZE = """
() => {
  const d = document.documentElement;
  const b = document.body;
  return {
    width: Math.max(d.scrollWidth, b ? b.scrollWidth : 0, d.clientWidth),
    height: Math.max(d.scrollHeight, b ? b.scrollHeight : 0, d.clientHeight),
  };
}
"""

WAIT_FOR_ASSETS = """
async (timeoutMs) => {
  const pending = [];
  if (document.fonts && document.fonts.ready) {
    pending.push(document.fonts.ready.catch(() => undefined));
  }
  for (const img of Array.from(document.images)) {
    if (img.complete) continue;
    pending.push(new Promise((resolve) => {
      img.addEventListener('load', resolve, { once: true });
      img.addEventListener('error', resolve, { once: true });
    }));
  }
  let timer;
  const timeout = new Promise((resolve) => { timer = setTimeout(() => resolve(false), timeoutMs); });
  const result = await Promise.race([Promise.all(pending).then(() => true), timeout]);
  clearTimeout(timer);
  return result;
}
"""

SCROLL_STEP = """
(stepPx) => {
  const el = document.scrollingElement || document.documentElement;
  window.scrollBy(0, stepPx);
  return { y: window.scrollY, maxY: Math.max(0, el.scrollHeight - window.innerHeight) };
}
"""

SCROLL_TO = """
(y) => {
  window.scrollTo(0, y);
  return window.scrollY;
}
"""

NEXT_FRAME = """
() => new Promise((resolve) => requestAnimationFrame(() => requestAnimationFrame(() => resolve(true))))
"""

LIVE_RENDER_PENDING = """
(flag) => window[flag] === false
"""

LIVE_RENDER_DONE = """
(flag) => window[flag] === true
"""

STITCH_APPLY = """
({ elements, gap, padding, token, rootSelector }) => {
  const nodes = elements.filter((el) => el && el.isConnected && el.parentElement);
  if (!nodes.length) return null;
  const registry = (window.__docshotStitch = window.__docshotStitch || {});
  // The container must not live inside any node it is about to receive
  let host = nodes[0].closest(rootSelector) || document.body;
  while (host && nodes.some((n) => n.contains(host))) host = host.parentElement;
  if (!host) host = document.documentElement;

  const container = document.createElement('div');
  container.setAttribute('data-docshot-stitch', token);
  container.style.cssText = [
    'display:flex', 'flex-direction:column', 'align-items:stretch',
    `gap:${gap}px`, `padding:${padding}px`, 'box-sizing:border-box',
    'margin:0', 'position:relative', 'clear:both',
  ].join(';');
  host.appendChild(container);

  const moves = [];
  try {
    for (const node of nodes) {
      const placeholder = document.createComment('docshot-stitch-placeholder');
      node.parentNode.insertBefore(placeholder, node);
      moves.push({ node, placeholder });
      const wrapper = document.createElement('div');
      wrapper.style.cssText = 'display:flex;justify-content:center;width:100%;';
      wrapper.appendChild(node);
      container.appendChild(wrapper);
    }
  } finally {
    registry[token] = { container, moves };
  }
  return { token, moved: moves.length };
}
"""

STITCH_MEASURE = """
(token) => {
  const entry = (window.__docshotStitch || {})[token];
  if (!entry || !entry.container.isConnected) return null;
  const r = entry.container.getBoundingClientRect();
  if (!(r.width > 0) || !(r.height > 0)) return null;
  return { x: r.left + window.scrollX, y: r.top + window.scrollY, width: r.width, height: r.height };
}
"""

STITCH_RESTORE = """
(token) => {
  const registry = window.__docshotStitch || {};
  const entry = registry[token];
  if (!entry) return 0;
  delete registry[token];
  let restored = 0;
  for (let i = entry.moves.length - 1; i >= 0; i--) {
    const { node, placeholder } = entry.moves[i];
    if (placeholder.parentNode) {
      placeholder.parentNode.replaceChild(node, placeholder);
      restored++;
    }
  }
  if (entry.container.parentNode) entry.container.parentNode.removeChild(entry.container);
  return restored;
}
"""

CUT_CANDIDATES = """
({ rootSelector, top, bottom }) => {
  const containers = new Set(['DIV', 'SECTION', 'ARTICLE', 'MAIN']);
  let root = document.querySelector(rootSelector) || document.body;
  while (root && root.children.length === 1 && containers.has(root.children[0].tagName)) {
    root = root.children[0];
  }
  if (!root) return [];
  const bottomOf = (el) => el.getBoundingClientRect().bottom + window.scrollY;
  const out = [];
  for (const child of Array.from(root.children)) {
    if (child.tagName === 'UL' || child.tagName === 'OL') {
      const items = Array.from(child.children).filter((c) => c.tagName === 'LI');
      if (items.length) {
        items.forEach((li) => out.push(bottomOf(li)));
        continue;
      }
    }
    out.push(bottomOf(child));
  }
  return out.filter((y) => y > top && y <= bottom).map((y) => y - top);
}
"""
