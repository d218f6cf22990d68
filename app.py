# app.py
"""
Commission Hub - Main Entry Point

Version: 1.0.0
"""

import streamlit as st
from commission_hub.auth import AuthManager
from commission_hub.db import check_db_connection, get_connection_pool_status, reset_db_engine
from commission_hub.sales_commission import SalesRepository, LIMIT_CREDITO
from commission_hub.sales_commission.fragments import format_brl
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Commission Hub"
APP_ICON = "💰"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1f77b4;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .welcome-box {
        background: linear-gradient(135deg, #1f77b4 0%, #2196f3 100%);
        color: white;
        padding: 2rem;
        border-radius: 0.75rem;
        margin-bottom: 2rem;
    }

    .welcome-title {
        font-size: 1.75rem;
        font-weight: 600;
        margin-bottom: 0.5rem;
    }

    .info-card {
        background: #f8f9fa;
        padding: 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #1f77b4;
        margin-bottom: 1rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

repository = SalesRepository()
auth = AuthManager(repository)


@st.cache_resource(show_spinner=False)
def bootstrap_database() -> bool:
    """Create tables and the first admin account (once per process)."""
    repository.init_schema()
    auth.seed_users_if_needed()
    return True


# ==================== HELPER FUNCTIONS ====================

def show_login_page():
    """Display the login page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Comissões de consultores, parcela a parcela</p>', unsafe_allow_html=True)

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        with st.form("login_form", clear_on_submit=False):
            st.markdown("#### 🔐 Entrar")

            username = st.text_input("Usuário", key="login_username")
            password = st.text_input("Senha", type="password", key="login_password")

            submit = st.form_submit_button("🔑 Entrar", type="primary", use_container_width=True)

            if submit:
                if not username or not password:
                    st.warning("Informe usuário e senha")
                else:
                    with st.spinner("Autenticando..."):
                        success, result = auth.authenticate(username, password)

                    if success:
                        auth.login(result)
                        st.success("✅ Login realizado!")
                        st.rerun()
                    else:
                        st.error(result.get("error", "Falha na autenticação"))

        with st.expander("ℹ️ Ajuda"):
            st.info(f"""
            - A sessão expira após {int(auth.session_timeout.total_seconds() // 3600)} horas
            - O primeiro acesso usa o usuário `admin` (senha em ADMIN_PASSWORD)
            """)


def show_user_admin():
    """Admins create consultor accounts here."""
    with st.expander("👥 Usuários (admin)"):
        users = repository.list_users()
        if users:
            st.dataframe(users, use_container_width=True, hide_index=True)

        with st.form("new_user_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                username = st.text_input("Usuário")
                display_name = st.text_input("Nome do consultor")
            with col2:
                password = st.text_input("Senha", type="password")
                role = st.selectbox("Perfil", ["consultor", "admin"])

            if st.form_submit_button("➕ Criar usuário"):
                if not username.strip() or not password:
                    st.warning("Informe usuário e senha")
                elif repository.find_user_by_username(username.strip()):
                    st.error("Usuário já existe")
                else:
                    auth.create_user(username, password, display_name, role)
                    st.cache_data.clear()
                    st.success(f"Usuário {username} criado")


def show_main_app():
    """Display the main application after login"""

    with st.sidebar:
        st.markdown(f"### 👤 {auth.get_user_display_name()}")

        if auth.is_admin():
            st.success("🔓 Acesso total")
        else:
            st.warning("👤 Acesso pessoal")

        st.caption(f"Perfil: {st.session_state.get('user_role')}")
        st.markdown("---")

        if st.button("🚪 Sair", use_container_width=True):
            auth.logout()
            st.rerun()

    st.markdown(f"""
    <div class="welcome-box">
        <div class="welcome-title">Olá, {auth.get_user_display_name()}! 👋</div>
        <div>Abra o painel de comissões no menu lateral.</div>
    </div>
    """, unsafe_allow_html=True)

    st.markdown(f"""
    <div class="info-card">
        <strong>💰 Comissões</strong><br>
        <span style="color: #666;">Vendas, crédito (limite {format_brl(LIMIT_CREDITO)}), comissão em 6 parcelas,
        ranking e exportação.</span>
    </div>
    """, unsafe_allow_html=True)

    if auth.is_admin():
        show_user_admin()

        st.markdown("---")
        with st.expander("🔧 System Status (Admin Only)"):
            pool_status = get_connection_pool_status()

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("DB Status", pool_status.get("status", "OK"))
            with col2:
                st.metric("Pool", pool_status.get("pool", "-"))
            with col3:
                st.metric("Connections Used", pool_status.get("checked_out", 0))

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.error(f"⚠️ {db_error}")
        if st.button("🔄 Reconectar"):
            reset_db_engine()
            st.rerun()
        return

    bootstrap_database()

    if not auth.check_session():
        show_login_page()
    else:
        show_main_app()


if __name__ == "__main__":
    main()
