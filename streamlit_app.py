from __future__ import annotations

import requests
import streamlit as st

from podomus.client import PodomusClient, RPCError
from podomus.config import get_settings
from podomus.schemas import ServiceOut

st.set_page_config(page_title="Podomus - Cabinet de Podologie", layout="wide")

API_BASE = get_settings().api_base

CONTACT = {
    "address": "Bm02, 1er étage, Golf Center 2, avenue de l'environnement, Dar Fadhal, La Soukra, Ariana",
    "phone": "28 451 433",
    "email": "sonda@podomus.tn",
    "hours": {
        "Lundi - Vendredi": "8h00 - 18h00",
        "Samedi": "8h00 - 13h00",
        "Dimanche": "Fermé",
    },
}

SUBJECTS = [
    "Demande de rendez-vous",
    "Renseignements sur les tarifs",
    "Question sur un traitement",
    "Suivi de consultation",
    "Informations sur les orthèses",
    "Urgence podologique",
    "Autre",
]

ICONS = {
    "pedicurie-medicale": "🦶",
    "semelles-orthopediques": "👟",
    "orthoplastie-onychoplastie": "💅",
}


def client() -> PodomusClient:
    return PodomusClient(API_BASE)


@st.cache_data(ttl=30)
def load_services() -> list[dict]:
    # cache_data needs picklable values
    return [s.model_dump() for s in client().get_active_services()]


def render_service_card(service: ServiceOut) -> None:
    st.markdown(f"### {ICONS.get(service.slug, '•')} {service.name}")
    st.write(service.description)
    details = f"⏱ {service.duration_minutes} minutes"
    if service.price is not None:
        details += f" · {service.price:.2f} €"
    st.caption(details)


def render_service_detail(slug: str) -> None:
    """Detail page of one service, fetched by slug."""
    try:
        service = client().get_service_by_slug(slug)
    except (requests.RequestException, RPCError) as e:
        st.error(f"API non joignable : {e}")
        return
    if service is None or not service.is_active:
        st.warning("Service introuvable.")
        return

    st.subheader(f"{ICONS.get(service.slug, '•')} {service.name}")
    st.write(service.description)
    c1, c2 = st.columns(2)
    c1.metric("Durée", f"{service.duration_minutes} min")
    c2.metric("Tarif", f"{service.price:.2f} €" if service.price is not None else "Sur devis")
    st.info(f"Pour prendre rendez-vous : onglet Contact ou {CONTACT['phone']}.")



# Sidebar

with st.sidebar:
    st.header("Podomus")
    st.write("**Dr. Sonda AFFES**")
    st.caption("Pédicure-Podologue")
    st.divider()
    st.write(f"📞 {CONTACT['phone']}")
    st.write(f"✉️ {CONTACT['email']}")
    st.write(f"📍 {CONTACT['address']}")
    st.divider()
    for day, hours in CONTACT["hours"].items():
        st.write(f"{day} : {hours}")
    st.caption(f"API: {API_BASE}")



# Pages

tab_home, tab_services, tab_about, tab_info, tab_contact = st.tabs(
    ["Accueil", "Services", "À propos", "Infos patients", "Contact"]
)

try:
    services = [ServiceOut.model_validate(s) for s in load_services()]
    services_error = None
except (requests.RequestException, RPCError) as e:
    services = []
    services_error = str(e)


with tab_home:
    st.title("Prenez soin de vos pieds")
    st.subheader("Cabinet de podologie à La Soukra")
    st.write(
        "Dr. Sonda AFFES vous accueille pour des soins podologiques personnalisés : "
        "pédicurie médicale, semelles orthopédiques sur mesure, orthoplastie et onychoplastie."
    )
    c1, c2, c3 = st.columns(3)
    c1.metric("Spécialités", "3")
    c2.metric("Réponse aux messages", "24h")
    c3.metric("Ouvert le samedi", "8h - 13h")


with tab_services:
    st.header("Nos services spécialisés")
    if services_error:
        st.error(f"API non joignable : {services_error}")
    elif not services:
        st.info("Aucun service disponible pour le moment.")
    else:
        for service in services:
            render_service_card(service)
            st.divider()

        st.header("Détail d'un service")
        names = {s.name: s.slug for s in services}
        chosen = st.selectbox("Service", options=list(names), key="service_detail")
        if chosen:
            render_service_detail(names[chosen])


with tab_about:
    st.header("À propos")
    st.write(
        "Diplômée en podologie, Dr. Sonda AFFES accompagne ses patients de tous âges : "
        "sportifs, personnes âgées, patients diabétiques et enfants."
    )
    st.markdown(
        "- Équipement médical de dernière génération\n"
        "- Consultations personnalisées selon vos besoins\n"
        "- Suivi thérapeutique complet\n"
        "- Environnement stérilisé et sécurisé\n"
        "- Conseils préventifs et éducation thérapeutique"
    )


with tab_info:
    st.header("Informations pratiques")
    st.subheader("Avant votre rendez-vous")
    st.markdown(
        "- Apportez vos chaussures habituelles et vos anciennes semelles\n"
        "- Munissez-vous de vos ordonnances et examens récents\n"
        "- Signalez tout traitement en cours (anticoagulants, diabète...)"
    )
    st.subheader("Horaires")
    for day, hours in CONTACT["hours"].items():
        st.write(f"**{day}** : {hours}")



# Contact form

with tab_contact:
    st.header("Contactez-nous")

    if st.session_state.get("contact_sent"):
        st.success("Message envoyé ! Dr. Sonda AFFES vous répondra dans les plus brefs délais.")
        st.caption(f"Délai de réponse habituel : 24h. Pour les urgences : {CONTACT['phone']}")
        if st.button("Envoyer un autre message", key="contact_again"):
            st.session_state.pop("contact_sent", None)
            st.rerun()
    else:
        with st.form("contact_form"):
            c1, c2 = st.columns(2)
            name = c1.text_input("Nom complet *")
            email = c2.text_input("Email *")
            phone = c1.text_input("Téléphone")
            subject = c2.selectbox("Sujet *", options=SUBJECTS)
            message = st.text_area("Message *", height=150)
            is_rdv = st.checkbox("Il s'agit d'une demande de rendez-vous")
            submitted = st.form_submit_button("Envoyer")

        if submitted:
            try:
                client().create_contact_message(
                    name=name.strip(),
                    email=email.strip(),
                    phone=phone.strip() or None,
                    subject=subject,
                    message=message.strip(),
                    is_appointment_request=is_rdv,
                )
                st.session_state["contact_sent"] = True
                st.rerun()
            except RPCError as e:
                if e.code == "BAD_REQUEST":
                    for issue in e.data.get("issues", []):
                        st.error(issue["message"])
                else:
                    st.error("Une erreur s'est produite. Veuillez réessayer ou nous contacter directement.")
            except requests.RequestException:
                st.error("Une erreur s'est produite. Veuillez réessayer ou nous contacter directement.")
