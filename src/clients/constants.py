"""Templates seeded on every new client."""

# (item_key, label)
ONBOARDING_CHECKLIST_TEMPLATE = (
    ("crear_grupo_wa", "Crear grupo WhatsApp"),
    ("enviar_bienvenida", "Enviar bienvenida"),
    ("enviar_formulario", "Enviar formulario (según tipo de negocio)"),
    ("enviar_link_kickoff", "Enviar link para agendar kickoff"),
    ("kickoff_completado", "Marcar kickoff como hecho"),
)

# (phase_name, start_day, end_day); order is the 1-based position.
ADVANCE90_PHASES = (
    ("Onboarding", 0, 7),
    ("Guiones R1", 7, 14),
    ("Grabación y Edición R1", 14, 25),
    ("Publicación + Pauta R1", 25, 30),
    ("Optimización", 31, 60),
    ("Ronda 2 (Data-driven)", 61, 90),
    ("Llamada Final", 90, 90),
)
