"""Browser test page for registering, logging in and uploading."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])

# The upload form posts the token as a form field, not a header
TEST_PAGE = """<!DOCTYPE html>
<html>
<body>
    <h2>File Upload Test</h2>

    <h3>1. Register</h3>
    <form id="registerForm">
        <input type="text" id="regUsername" placeholder="Username" required><br><br>
        <input type="password" id="regPassword" placeholder="Password" required><br><br>
        <button type="submit">Register</button>
    </form>
    <div id="registerResult"></div>

    <h3>2. Login</h3>
    <form id="loginForm">
        <input type="text" id="loginUsername" placeholder="Username" required><br><br>
        <input type="password" id="loginPassword" placeholder="Password" required><br><br>
        <button type="submit">Login</button>
    </form>
    <div id="loginResult"></div>

    <h3>3. Upload an image</h3>
    <form action="/api/v1/upload" method="post" enctype="multipart/form-data">
        <input type="file" name="data" accept="image/*" required><br><br>
        <input type="text" name="token" id="tokenField" placeholder="Token (from register or login)" required><br><br>
        <input type="submit" value="Upload Image">
    </form>

    <script>
        async function submitCredentials(url, prefix, resultId) {
            const username = document.getElementById(prefix + 'Username').value;
            const password = document.getElementById(prefix + 'Password').value;
            const out = document.getElementById(resultId);
            try {
                const response = await fetch(url, {
                    method: 'POST',
                    headers: { 'Content-Type': 'application/json' },
                    body: JSON.stringify({ username, password })
                });
                const result = await response.json();
                out.textContent = JSON.stringify(result, null, 2);
                if (result.token) {
                    document.getElementById('tokenField').value = result.token;
                }
            } catch (error) {
                out.textContent = 'Error: ' + error.message;
            }
        }

        document.getElementById('registerForm').addEventListener('submit', (e) => {
            e.preventDefault();
            submitCredentials('/api/v1/register', 'reg', 'registerResult');
        });
        document.getElementById('loginForm').addEventListener('submit', (e) => {
            e.preventDefault();
            submitCredentials('/api/v1/login', 'login', 'loginResult');
        });
    </script>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index_page() -> HTMLResponse:
    return HTMLResponse(TEST_PAGE)
