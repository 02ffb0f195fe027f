"""Domain constants shared by the protocol services."""

# Reproductive-status labels written to animals on application
CATEGORY_IATF = "IATF"
CATEGORY_PRE_SYNC = "Pré-sincronização"

# collect_links status filter
STATUS_ACTIVE = "ATIVO"

# Traceability key added to every generated details payload
ORIGIN_PROTOCOL_KEY = "origem_protocolo"

# Step keys holding the day offset, first match wins
STEP_OFFSET_KEYS = ("dia", "day", "offset_dias", "offsetDias")

# Details keys used for a calendar title, first non-empty wins
TITLE_KEYS = ("acao", "hormonio", "titulo")
