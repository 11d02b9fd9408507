"""
TradeShield Streamlit UI
A demo interface for the trade analysis API.
"""

from typing import Any, Dict, List, Optional

import requests
import streamlit as st


st.set_page_config(
    page_title="TradeShield Demo",
    page_icon="🛡️",
    layout="wide",
)

LEVEL_ICONS = {"low": "🟢", "medium": "🟡", "high": "🔴"}


# ---------- Helpers ----------


def call_analyze(base_url: str, kind: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """POST a JSON payload to /api/analyze/<kind> and return the envelope."""
    endpoint = f"{base_url.rstrip('/')}/api/analyze/{kind}"
    resp = requests.post(endpoint, json=payload, timeout=120)
    body = resp.json()
    if not body.get("success"):
        # Error envelopes carry the reason; show it rather than a bare status code
        details = body.get("details") or []
        message = body.get("error", f"HTTP {resp.status_code}")
        if details:
            message += ": " + "; ".join(
                f"{'.'.join(str(p) for p in d['path'])} - {d['message']}" for d in details
            )
        raise RuntimeError(message)
    return body["data"]


def send_feedback(base_url: str, analysis_id: int, was_accurate: bool, outcome: str, comments: str):
    resp = requests.post(
        f"{base_url.rstrip('/')}/api/feedback",
        json={
            "analysisId": analysis_id,
            "wasAccurate": was_accurate,
            "actualOutcome": outcome,
            "comments": comments or None,
        },
        timeout=10,
    )
    resp.raise_for_status()


def render_list(title: str, items: List[str]):
    if items:
        st.markdown(f"**{title}**")
        for item in items:
            st.markdown(f"- {item}")


def render_level(label: str, level: str, score: Any):
    col1, col2 = st.columns(2)
    with col1:
        st.metric(label, f"{LEVEL_ICONS.get(level, '⚪')} {level.upper()}")
    with col2:
        st.metric("Score", f"{score}/100")


def render_listing(data: Dict[str, Any]):
    st.subheader("🔎 Listing Risk")
    render_level("Risk Level", data["riskLevel"], data["riskScore"])

    patterns = data.get("detectedPatterns") or []
    if patterns:
        st.markdown(" ".join(f"`{p}`" for p in patterns))

    col_left, col_right = st.columns(2)
    with col_left:
        render_list("⚠️ Warnings", data.get("warnings") or [])
    with col_right:
        render_list("💡 Recommendations", data.get("recommendations") or [])

    price = data.get("priceAnalysis")
    if price:
        icon = "✅" if price.get("isPriceNormal") else "❗"
        st.info(f"{icon} Price: {price.get('priceComment', '')}")

    if data.get("translatedText"):
        with st.expander("🌐 Translation"):
            st.write(data["translatedText"])

    st.markdown("**📝 Reasoning**")
    st.write(data.get("reasoning", ""))


def render_seller(data: Dict[str, Any]):
    st.subheader("🔎 Seller Trust")
    render_level("Trust Level", data["trustLevel"], data["trustScore"])

    col_left, col_right = st.columns(2)
    with col_left:
        render_list("👍 Strengths", data.get("strengths") or [])
    with col_right:
        render_list("🚩 Concerns", data.get("concerns") or [])

    render_list("💡 Recommendations", data.get("recommendations") or [])
    st.markdown("**📝 Reasoning**")
    st.write(data.get("reasoning", ""))


def render_images(data: Dict[str, Any]):
    st.subheader("🔎 Image Authenticity")
    verdict = "Looks authentic" if data.get("isAuthentic") else "Possibly not authentic"
    st.metric("Verdict", verdict, help=f"Confidence {data.get('confidence')}%")
    render_level("Risk Level", data["riskLevel"], data["riskScore"])

    render_list("🚩 Detected Issues", data.get("detectedIssues") or [])
    render_list("👁️ Observations", data.get("observations") or [])
    render_list("💡 Recommendations", data.get("recommendations") or [])
    st.markdown("**📝 Reasoning**")
    st.write(data.get("reasoning", ""))


def run_analysis(kind: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    with st.spinner("Analyzing..."):
        try:
            data = call_analyze(base_url, kind, payload)
        except requests.exceptions.RequestException as e:
            st.error(f"Error calling backend: {e}")
            return None
        except RuntimeError as e:
            st.error(f"Analysis failed: {e}")
            return None
    st.session_state["last_analysis_id"] = data.get("analysisId")
    return data


# ---------- Sidebar config ----------


st.sidebar.title("⚙️ Settings")

base_url = st.sidebar.text_input(
    "Backend URL",
    value="http://127.0.0.1:8000",
    help="FastAPI server base URL.",
)

if st.sidebar.button("🔌 Check Connection"):
    try:
        resp = requests.get(f"{base_url.rstrip('/')}/status", timeout=5)
        if resp.status_code == 200:
            info = resp.json()
            st.sidebar.success("✅ Backend is online!")
            if not info.get("openai_configured"):
                st.sidebar.warning("OpenAI API key is not configured on the server.")
        else:
            st.sidebar.error(f"❌ Backend returned {resp.status_code}")
    except requests.exceptions.RequestException as e:
        st.sidebar.error(f"❌ Cannot connect: {e}")

st.sidebar.markdown("---")

last_id = st.session_state.get("last_analysis_id")
if last_id:
    st.sidebar.markdown(f"**Feedback on analysis #{last_id}**")
    accurate = st.sidebar.radio("Was the analysis accurate?", ["Yes", "No"], horizontal=True)
    outcome = st.sidebar.selectbox(
        "What happened?",
        ["safe_transaction", "scam_detected", "price_issue", "other"],
    )
    comments = st.sidebar.text_area("Comments (optional)", max_chars=1000)
    if st.sidebar.button("📨 Send feedback"):
        try:
            send_feedback(base_url, last_id, accurate == "Yes", outcome, comments)
            st.sidebar.success("Thanks for the feedback!")
        except requests.exceptions.RequestException as e:
            st.sidebar.error(f"Could not send feedback: {e}")


# ---------- Main UI ----------


st.title("🛡️ TradeShield")
st.markdown("**AI fraud check for K-pop merchandise trades**")
st.markdown("---")

tabs = st.tabs(["📝 Listing", "👤 Seller", "🖼️ Images"])


# --- LISTING TAB ---
with tabs[0]:
    st.header("Trading Post Analysis")

    listing_url = st.text_input("Post URL", placeholder="https://twitter.com/user/status/123")
    listing_text = st.text_area(
        "Post content",
        height=180,
        max_chars=10000,
        placeholder="포토카드 양도합니다! 급해요! 선입금만 받아요",
    )
    col1, col2 = st.columns(2)
    with col1:
        listing_price = st.number_input("Asked price (KRW, optional)", min_value=0.0, step=500.0)
    with col2:
        listing_item = st.text_input("Item name (optional)")
    listing_images = st.text_area("Image URLs (optional, one per line)", key="listing_images")

    if st.button("🔍 Analyze Listing", key="analyze_listing", type="primary"):
        if not listing_url.strip() or not listing_text.strip():
            st.warning("Please enter the post URL and content.")
        else:
            payload: Dict[str, Any] = {
                "url": listing_url.strip(),
                "text": listing_text,
                "images": [u.strip() for u in listing_images.splitlines() if u.strip()],
            }
            if listing_price > 0:
                payload["price"] = listing_price
            if listing_item.strip():
                payload["itemName"] = listing_item.strip()
            data = run_analysis("listing", payload)
            if data:
                render_listing(data)


# --- SELLER TAB ---
with tabs[1]:
    st.header("Seller Trust Check")

    seller_url = st.text_input("Profile URL", placeholder="https://x.com/kpop_seller")
    col1, col2 = st.columns(2)
    with col1:
        seller_name = st.text_input("Username", max_chars=100)
    with col2:
        seller_platform = st.selectbox("Platform", ["twitter", "instagram", "unknown"])

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        account_age = st.number_input("Account age (days)", min_value=0, step=1)
    with col2:
        followers = st.number_input("Followers", min_value=0, step=1)
    with col3:
        following = st.number_input("Following", min_value=0, step=1)
    with col4:
        posts = st.number_input("Posts", min_value=0, step=1)
    seller_bio = st.text_area("Bio (optional)", max_chars=2000)

    if st.button("🔍 Analyze Seller", key="analyze_seller", type="primary"):
        if not seller_url.strip() or not seller_name.strip():
            st.warning("Please enter the profile URL and username.")
        else:
            payload = {
                "url": seller_url.strip(),
                "username": seller_name.strip(),
                "platform": seller_platform,
            }
            # Counts are only sent along with an account age
            if account_age > 0:
                payload.update({
                    "accountAge": int(account_age),
                    "followerCount": int(followers),
                    "followingCount": int(following),
                    "postCount": int(posts),
                })
            if seller_bio.strip():
                payload["bio"] = seller_bio.strip()
            data = run_analysis("seller", payload)
            if data:
                render_seller(data)


# --- IMAGES TAB ---
with tabs[2]:
    st.header("Item Photo Authenticity")

    image_urls = st.text_area("Image URLs (1-10, one per line)", key="image_urls")
    col1, col2 = st.columns(2)
    with col1:
        image_item = st.text_input("Item name (optional)", key="image_item")
    with col2:
        condition = st.selectbox("Expected condition", ["(not specified)", "new", "like_new", "used", "unknown"])

    urls = [u.strip() for u in image_urls.splitlines() if u.strip()]
    if urls:
        st.image(urls[:10], width=160)

    if st.button("🔍 Analyze Images", key="analyze_images", type="primary"):
        if not 1 <= len(urls) <= 10:
            st.warning("Please enter between 1 and 10 image URLs.")
        else:
            payload = {"imageUrls": urls}
            if image_item.strip():
                payload["itemName"] = image_item.strip()
            if condition != "(not specified)":
                payload["expectedCondition"] = condition
            data = run_analysis("image", payload)
            if data:
                render_images(data)


# --- Footer ---
st.markdown("---")
st.markdown(
    "<div style='text-align: center; color: gray;'>"
    "TradeShield v0.1.0 • AI fraud check for merchandise trades"
    "</div>",
    unsafe_allow_html=True,
)
