"""页面路由 -- 看板页与登录页

只渲染最小的 HTML 骨架，数据通过 /api/tasks 获取。
访问控制由 AuthGateMiddleware 负责。
"""

from fastapi import APIRouter
from starlette.responses import HTMLResponse

router = APIRouter()

_BOARD_PAGE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Taskboard</title>
</head>
<body>
  <h1>Taskboard</h1>
  <ol id="tasks"></ol>
  <script>
    fetch("/api/tasks").then((r) => r.json()).then((board) => {
      const list = document.getElementById("tasks");
      for (const task of board.tasks || []) {
        const item = document.createElement("li");
        item.textContent = `[${task.score}] ${task.title} (${task.status})`;
        list.appendChild(item);
      }
    });
  </script>
</body>
</html>
"""

_LOGIN_PAGE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Taskboard login</title>
</head>
<body>
  <form id="login">
    <input type="password" name="passcode" placeholder="Passcode" autofocus>
    <button type="submit">Sign in</button>
  </form>
  <script>
    document.getElementById("login").addEventListener("submit", async (e) => {
      e.preventDefault();
      const passcode = new FormData(e.target).get("passcode");
      const r = await fetch("/api/login", {
        method: "POST",
        headers: {"Content-Type": "application/json"},
        body: JSON.stringify({passcode}),
      });
      if (r.ok) window.location.href = "/";
    });
  </script>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
async def board_page():
    return HTMLResponse(_BOARD_PAGE)


@router.get("/login", response_class=HTMLResponse)
async def login_page():
    return HTMLResponse(_LOGIN_PAGE)
