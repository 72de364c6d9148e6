"""Login and registration screens."""
import time
from typing import Optional

import streamlit as st

from medi360.infrastructure.auth.user_manager import UserManager
from medi360.infrastructure.auth.validators import (
    passwords_match,
    validate_email,
    validate_full_name,
    validate_password,
    validate_phone,
)


CHAT_STATE_KEYS = ("chat_session_id", "chat_messages", "last_reply", "profile_saved", "emergency_alert")


def collect_registration_errors(
    full_name: str, email: str, phone: str, password: str, confirm_password: str
) -> list:
    errors = []
    for valid, error in (
        validate_full_name(full_name),
        validate_email(email),
        validate_phone(phone),
    ):
        if not valid:
            errors.append(error)

    password_valid, password_error = validate_password(password)
    if not password_valid:
        errors.append(password_error)
    else:
        match_valid, match_error = passwords_match(password, confirm_password)
        if not match_valid:
            errors.append(match_error)
    return errors


def show_login_screen(user_manager: Optional[UserManager] = None) -> bool:
    st.markdown("# 🔐 Login")
    st.markdown("Sign in to MEDI-360 to check symptoms and track your health.")

    with st.form("login_form"):
        email = st.text_input("Email", placeholder="your.email@example.com")
        password = st.text_input("Password", type="password", placeholder="Enter your password")

        col1, col2 = st.columns([1, 1])
        with col1:
            submit = st.form_submit_button("Login", use_container_width=True)
        with col2:
            register_btn = st.form_submit_button("Need an account? Register", use_container_width=True)

        if register_btn:
            st.session_state.auth_mode = "register"
            st.rerun()

        if submit:
            if not email or not password:
                st.error("❌ Please enter both email and password")
                return False

            email_valid, email_error = validate_email(email)
            if not email_valid:
                st.error(f"❌ {email_error}")
                return False

            manager = user_manager or UserManager()
            success, user_data = manager.authenticate_user(email, password)
            if not success:
                st.error("❌ Invalid email or password")
                return False

            st.session_state.authenticated = True
            st.session_state.user_data = user_data
            st.success(f"✅ Welcome back, {user_data['full_name']}!")
            st.rerun()
            return True

    return False


def show_register_screen(user_manager: Optional[UserManager] = None) -> bool:
    st.markdown("# ✍️ Register")
    st.markdown("Create your MEDI-360 account.")

    with st.form("register_form"):
        full_name = st.text_input("Full Name", placeholder="Asha Patel")
        email = st.text_input("Email", placeholder="your.email@example.com")
        phone = st.text_input("Phone (optional)", placeholder="10-digit number")
        password = st.text_input("Password", type="password")
        confirm_password = st.text_input("Confirm Password", type="password")
        st.caption("Password must be at least 6 characters.")

        col1, col2 = st.columns([1, 1])
        with col1:
            submit = st.form_submit_button("Register", use_container_width=True)
        with col2:
            login_btn = st.form_submit_button("Already have an account? Login", use_container_width=True)

        if login_btn:
            st.session_state.auth_mode = "login"
            st.rerun()

        if submit:
            errors = collect_registration_errors(full_name, email, phone, password, confirm_password)
            if errors:
                for error in errors:
                    st.error(f"❌ {error}")
                return False

            manager = user_manager or UserManager()
            success, message = manager.register_user(
                full_name=full_name,
                email=email,
                password=password,
                phone_number=phone or None,
            )
            if not success:
                st.error(f"❌ {message}")
                return False

            st.success(f"✅ {message}! Please login to continue.")
            st.session_state.auth_mode = "login"
            time.sleep(2)
            st.rerun()
            return True

    return False


def show_auth_screen() -> bool:
    """Render login or registration; returns True once the user is signed in."""
    if "auth_mode" not in st.session_state:
        st.session_state.auth_mode = "login"

    if st.session_state.get("authenticated", False):
        return True

    if st.session_state.auth_mode == "register":
        return show_register_screen()
    return show_login_screen()


def logout():
    st.session_state.authenticated = False
    st.session_state.user_data = None
    st.session_state.auth_mode = "login"
    for key in CHAT_STATE_KEYS:
        if key in st.session_state:
            del st.session_state[key]
    st.rerun()
