"""
Manual check for the change channel: logs in, opens /ws and prints every
event pushed to the account.
Run: python -m scripts.chat_ws_client EMAIL PASSWORD [http://127.0.0.1:8000]
"""
import json
import sys
from urllib.parse import quote

import httpx
import websocket

if len(sys.argv) < 3:
    print("Usage: python -m scripts.chat_ws_client EMAIL PASSWORD [BASE_URL]")
    sys.exit(2)

email, password = sys.argv[1], sys.argv[2]
base_url = sys.argv[3] if len(sys.argv) > 3 else "http://127.0.0.1:8000"

response = httpx.post(f"{base_url}/auth/login/json", json={"email": email, "password": password})
response.raise_for_status()
token = response.json()["access_token"]

ws = websocket.WebSocket()
ws.connect(base_url.replace("http", "ws", 1) + "/ws?token=" + quote(token))

print("✅ Connected to change channel")

while True:
    event = json.loads(ws.recv())
    print("🔔 Event:", event)
