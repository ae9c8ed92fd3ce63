# lambda_function.py
# Creates a Stripe Checkout session for one price and returns its redirect URL.
import os, json, base64, logging, traceback

import stripe

log = logging.getLogger()
log.setLevel(logging.INFO)

PRICE_PREFIX = "price_"
SUCCESS_PAGE = "success.html"
CANCEL_PAGE  = "cancel.html"

ERR_METHOD     = "Method Not Allowed"
ERR_JSON       = "Invalid JSON body"
ERR_PRICE_ID   = f"Missing or invalid priceId (must start with {PRICE_PREFIX})"
ERR_SECRET_KEY = "Missing STRIPE_SECRET_KEY in environment variables"
ERR_SITE_URL   = "Could not determine site URL for redirect"
ERR_SERVER     = "Server error"

# ====== LOGGING HELPERS ======
def _jlog(evt, level=logging.INFO, **kw):
    rec = {"evt": evt, **kw}
    try:
        log.log(level, json.dumps(rec, ensure_ascii=False))
    except Exception:
        log.log(level, f"{evt} | {kw}")

# ====== HTTP RESPONSES ======
# Same-origin only: preflight OPTIONS gets a 405 like any other non-POST, so no CORS headers.
def _resp(code, obj):
    return {
        "statusCode": code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(obj),
    }

# ====== REQUEST ======
def _dict(v):
    return v if isinstance(v, dict) else {}

def _method(event):
    # Netlify / API Gateway REST use httpMethod, HTTP APIs use requestContext.http
    m = event.get("httpMethod") or _dict(_dict(event.get("requestContext")).get("http")).get("method")
    return m.upper() if isinstance(m, str) else ""

def _header(event, name):
    name = name.lower()
    for k, v in _dict(event.get("headers")).items():
        if k.lower() == name:
            return v
    return None

def _parse_body(event):
    """Return the decoded JSON body. Raises ValueError when it is not JSON."""
    body_raw = event.get("body") or "{}"
    if isinstance(body_raw, dict):
        return body_raw
    if not isinstance(body_raw, (str, bytes)):
        raise ValueError(f"unsupported body type: {type(body_raw).__name__}")
    try:
        if event.get("isBase64Encoded"):
            body_raw = base64.b64decode(body_raw)
        if isinstance(body_raw, bytes):
            body_raw = body_raw.decode("utf-8")
    except ValueError as e:
        raise ValueError(f"undecodable body: {e}")
    try:
        return json.loads(body_raw)
    except RecursionError:
        raise ValueError("body nested too deeply")

def _valid_price_id(v):
    return isinstance(v, str) and bool(v) and v.startswith(PRICE_PREFIX)

def _site_url(event):
    """Redirect base: URL env, then Origin, then scheme + Host."""
    url = os.getenv("URL") or _header(event, "origin")
    if not url:
        host = _header(event, "host")
        if host:
            proto = (_header(event, "x-forwarded-proto") or "https").split(",")[0].strip()
            url = f"{proto or 'https'}://{host}"
    return url.rstrip("/") if url else None

def _error_message(e):
    msg = getattr(e, "user_message", None)
    if not msg and e.args and e.args[0]:
        msg = str(e.args[0])
    return msg or ERR_SERVER

# ====== STRIPE ======
def _create_session(secret_key, price_id, site_url, req_id=None):
    """Returns (url, None) on success, (None, error_message) on any provider failure."""
    try:
        session = stripe.checkout.Session.create(
            api_key=secret_key,
            mode="payment",
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=f"{site_url}/{SUCCESS_PAGE}",
            cancel_url=f"{site_url}/{CANCEL_PAGE}",
            billing_address_collection="required",
            phone_number_collection={"enabled": True},
        )
    except stripe.StripeError as e:
        _jlog("error", logging.ERROR, req_id=req_id, where="stripe", error=str(e),
              http_status=e.http_status, code=e.code)
        return None, _error_message(e)
    except Exception as e:
        _jlog("error", logging.ERROR, req_id=req_id, where="stripe", error=str(e),
              trace=traceback.format_exc()[:1500])
        return None, _error_message(e)

    url = getattr(session, "url", None)
    if not url:
        _jlog("error", logging.ERROR, req_id=req_id, where="stripe",
              error="session has no url", session_id=getattr(session, "id", None))
        return None, ERR_SERVER
    return url, None

# ====== HANDLER ======
def lambda_handler(event, context):
    event = event or {}
    req_id = getattr(context, "aws_request_id", None)

    try:
        if not isinstance(event, dict):
            raise TypeError(f"unsupported event type: {type(event).__name__}")
        req_id = _dict(event.get("requestContext")).get("requestId") or req_id

        if _method(event) != "POST":
            _jlog("rejected", req_id=req_id, reason="method", method=_method(event))
            return _resp(405, {"error": ERR_METHOD})

        try:
            body = _parse_body(event)
        except ValueError as e:
            _jlog("rejected", req_id=req_id, reason="body", error=str(e))
            return _resp(400, {"error": ERR_JSON})

        price_id = body.get("priceId") if isinstance(body, dict) else None
        _jlog("checkout_request", req_id=req_id, price_id=price_id)

        if not _valid_price_id(price_id):
            _jlog("rejected", req_id=req_id, reason="priceId")
            return _resp(400, {"error": ERR_PRICE_ID})

        secret_key = os.getenv("STRIPE_SECRET_KEY")
        if not secret_key:
            _jlog("error", logging.ERROR, req_id=req_id, where="config", error=ERR_SECRET_KEY)
            return _resp(500, {"error": ERR_SECRET_KEY})

        site_url = _site_url(event)
        if not site_url:
            _jlog("error", logging.ERROR, req_id=req_id, where="config", error=ERR_SITE_URL)
            return _resp(500, {"error": ERR_SITE_URL})

        url, err = _create_session(secret_key, price_id, site_url, req_id)
        if err:
            return _resp(500, {"error": err})

        _jlog("checkout_created", req_id=req_id, price_id=price_id)
        return _resp(200, {"url": url})

    except Exception as e:
        _jlog("error", logging.ERROR, req_id=req_id, where="handler", error=str(e),
              trace=traceback.format_exc()[:1500])
        return _resp(500, {"error": str(e) or ERR_SERVER})
