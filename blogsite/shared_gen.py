"""Generators for static assets shared by every rendered page."""

from __future__ import annotations

from pathlib import Path

from .io_utils import ensure_dir

LOAD_MORE_JS = """
(function loadMorePosts() {
  const button = document.querySelector('button.load-more[data-next-page]');
  const list = document.querySelector('[data-post-list]');
  const status = document.querySelector('[data-load-status]');
  if (!button || !list) return;

  let nextUrl = new URL(button.dataset.nextPage, window.location.href);
  let pending = false;

  function showStatus(message, kind) {
    if (!status) return;
    status.textContent = message;
    status.dataset.kind = kind;
    status.hidden = false;
  }

  function renderPost(post) {
    const link = document.createElement('a');
    link.className = 'post-summary';
    link.href = new URL(post.href, window.location.href).href;

    const title = document.createElement('h1');
    title.textContent = post.title;
    const subtitle = document.createElement('p');
    subtitle.textContent = post.subtitle;

    const info = document.createElement('div');
    info.className = 'post-info';
    const date = document.createElement('time');
    date.textContent = post.date;
    if (post.datetime) date.setAttribute('datetime', post.datetime);
    const author = document.createElement('span');
    author.textContent = post.author;
    info.append(date, author);

    link.append(title, subtitle, info);
    return link;
  }

  button.addEventListener('click', async () => {
    if (pending || !nextUrl) return;
    pending = true;
    button.disabled = true;
    try {
      const response = await fetch(nextUrl.href);
      if (!response.ok) {
        throw new Error(`HTTP ${response.status}`);
      }
      const payload = await response.json();
      if (status) status.hidden = true;
      (payload.results || []).forEach((post) => list.append(renderPost(post)));

      if (payload.error) {
        nextUrl = null;
        button.hidden = true;
        showStatus(
          payload.error.message || button.dataset.errorMessage || 'Failed to load posts.',
          payload.error.kind,
        );
      } else if (payload.truncated) {
        nextUrl = null;
        button.hidden = true;
        showStatus(payload.truncated.message, 'truncated');
      } else if (payload.next_page) {
        nextUrl = new URL(payload.next_page, nextUrl.href);
      } else {
        nextUrl = null;
        button.hidden = true;
      }
    } catch (error) {
      console.warn('[load-more] request failed', error);
      showStatus(button.dataset.errorMessage || 'Failed to load posts.', 'network-error');
    } finally {
      pending = false;
      button.disabled = false;
    }
  });
})();
"""

COMMON_CSS = """
:root {
  --bg: #1a1d23;
  --text: #d7d7d7;
  --heading: #f8f8f8;
  --muted: #bbbbbb;
  --accent: #ff57b2;
  --error: #ff6b6b;
  --font: "Inter", system-ui, -apple-system, "Segoe UI", sans-serif;
}

* { box-sizing: border-box; }

body {
  margin: 0;
  background: var(--bg);
  color: var(--text);
  font-family: var(--font);
}

.site-header, .container {
  max-width: 720px;
  margin: 0 auto;
  padding: 0 16px;
}

.site-header { padding-top: 64px; padding-bottom: 48px; }
.site-header .logo { color: var(--heading); font-weight: 800; font-size: 1.5rem; text-decoration: none; }
.site-header .logo span { color: var(--accent); }

.post-summary { display: block; color: inherit; text-decoration: none; margin-bottom: 48px; }
.post-summary h1 { color: var(--heading); font-size: 1.75rem; margin: 0 0 8px; }
.post-summary:hover h1 { color: var(--accent); }

.post-info { display: flex; flex-wrap: wrap; gap: 24px; color: var(--muted); font-size: 0.875rem; }

.load-more {
  background: none;
  border: 0;
  color: var(--accent);
  font: inherit;
  font-weight: 600;
  cursor: pointer;
  padding: 0;
}

.load-status[data-kind] { color: var(--error); }
.load-status[data-kind="truncated"] { color: var(--muted); }

.banner img { width: 100%; max-height: 400px; object-fit: cover; display: block; }
.post-content h1 { color: var(--heading); font-size: 3rem; margin: 80px 0 24px; }
.post-edited { font-style: italic; color: var(--muted); font-size: 0.875rem; }
.post-section h2 { color: var(--heading); margin-top: 64px; }
.post-section { line-height: 1.6; }

.post-navigation {
  display: flex;
  justify-content: space-between;
  gap: 16px;
  border-top: 1px solid #333;
  margin-top: 64px;
  padding: 48px 0;
}

.post-navigation a { color: var(--text); text-decoration: none; }
.post-navigation .next { margin-left: auto; text-align: right; }
.post-navigation small { display: block; color: var(--accent); }

.preview-banner {
  display: block;
  background: #4e4f59;
  color: var(--heading);
  text-align: center;
  padding: 12px;
  border-radius: 8px;
  margin: 0 0 48px;
  text-decoration: none;
}
"""


def generate_shared_assets(out_root: Path, assets_dir: str = "assets") -> list[Path]:
    """Write the load-more script and the stylesheet under ``out_root``."""

    target_dir = ensure_dir(out_root / assets_dir)
    js_path = target_dir / "load-more.js"
    css_path = target_dir / "common.css"
    js_path.write_text(LOAD_MORE_JS.lstrip(), encoding="utf-8")
    css_path.write_text(COMMON_CSS.lstrip(), encoding="utf-8")
    return [js_path, css_path]


__all__ = ["COMMON_CSS", "LOAD_MORE_JS", "generate_shared_assets"]
