# app.py
# Checkout demo (Gradio)
# Posts a Stripe price ID to the create-checkout-session function and links to the hosted checkout.

import os
import json
import html
from pathlib import Path

import requests
import gradio as gr
from dotenv import load_dotenv

# --- Optional: load .env (if present) ---
load_dotenv(dotenv_path=Path(__file__).parent / ".env", override=False)

# --- Config (adjust to your deploy) ---
API_BASE = os.getenv("API_BASE")
CHECKOUT_URL = os.getenv("CHECKOUT_URL") or (
    f"{API_BASE}/.netlify/functions/create-checkout-session" if API_BASE else None
)
DEFAULT_PRICE_ID = os.getenv("PRICE_ID", "")

# Never a valid Stripe price, so a live function always answers 400 to it
HEALTH_PRICE_ID = "health-check"

CUSTOM_CSS = """
.co-card{border:1px solid #d1d5db; border-radius:14px; padding:16px;}
.co-kv{display:flex; justify-content:space-between; gap:12px; padding:6px 0;}
.co-mono{font-family: ui-monospace, monospace; font-size:12px;}
a.co-btn{display:inline-block; padding:8px 12px; border:1px solid #d1d5db; border-radius:10px; text-decoration:none;}
"""

# --- Helpers ---

# Health check: an invalid price ID exercises routing and validation without touching Stripe
def api_health():
    if not CHECKOUT_URL:
        return False, "Set CHECKOUT_URL or API_BASE env var first."
    try:
        r = requests.post(CHECKOUT_URL, json={"priceId": HEALTH_PRICE_ID}, timeout=10)
        return (r.status_code == 400), f"API reachable: {r.status_code}"
    except Exception as e:
        return False, f"API error: {e}"

def call_checkout(price_id: str):
    if not CHECKOUT_URL:
        return None, {"error": "No checkout endpoint configured (CHECKOUT_URL or API_BASE)"}
    try:
        r = requests.post(CHECKOUT_URL, json={"priceId": price_id}, timeout=20)
    except requests.RequestException as e:
        return None, {"error": str(e)}
    try:
        data = r.json()
    except ValueError:
        data = None
    if r.status_code != 200:
        return None, (data if isinstance(data, dict) else {"error": r.text})
    if not isinstance(data, dict) or not data.get("url"):
        return None, {"error": f"Unexpected checkout response: {r.text[:200]}"}
    return data, None

def checkout_markdown(price_id):
    price_id = (price_id or "").strip()
    data, err = call_checkout(price_id)
    if err:
        return f"❌ Checkout API error:\n\n```\n{json.dumps(err, indent=2, ensure_ascii=False)}\n```"
    url = html.escape(data.get("url") or "", quote=True)
    return (
        f"<div class='co-card'>"
        f"<div class='co-kv'><span>Checkout</span><span><a class='co-btn' href='{url}' target='_blank' rel='noopener'>Open checkout</a></span></div>"
        f"<div class='co-kv'><span>Price</span><span class='co-mono'>{html.escape(price_id)}</span></div>"
        f"</div>"
    )

def health_markdown():
    ok, msg = api_health()
    return f"{'✅' if ok else '❌'} {msg}"

# --- UI ---
with gr.Blocks(title="Checkout demo", css=CUSTOM_CSS) as demo:
    gr.Markdown("# Checkout demo")

    with gr.Row():
        price = gr.Textbox(label="Stripe price ID", value=DEFAULT_PRICE_ID, placeholder="price_...")
        buy = gr.Button("Start checkout", variant="primary")
    out = gr.HTML(label="Checkout")
    buy.click(checkout_markdown, inputs=[price], outputs=[out])

    with gr.Row():
        health_btn = gr.Button("Check API")
        health_out = gr.Markdown(value="")
    health_btn.click(health_markdown, inputs=None, outputs=[health_out])

if __name__ == "__main__":
    demo.launch(server_name="0.0.0.0", server_port=7860)
