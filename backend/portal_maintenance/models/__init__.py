# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles
# (qr_codes.portal_id → portals.id, interventions.user_id → users.id).

from portal_maintenance.models.user import User  # noqa: F401 : doit précéder intervention
from portal_maintenance.models.portal import Portal  # noqa: F401 : doit précéder qr_code
from portal_maintenance.models.qr_code import QRCode  # noqa: F401
from portal_maintenance.models.intervention import Control, Intervention  # noqa: F401
