"""The signed-in employee at this till and what they are allowed to do."""
from passlib.context import CryptContext

from errors import PermissionDenied
from logger import get_logger

logger = get_logger(__name__)

# pbkdf2_sha256 for new hashes; bcrypt hashes from older seeds still verify.
pwd_ctx = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], default="pbkdf2_sha256", deprecated="auto")

OWNER_ROLE = "owner"
APPLY_DISCOUNTS = "pos:apply_discounts"


def hash_password(password):
    return pwd_ctx.hash(password)


class EmployeeSession:
    def __init__(self, db):
        self.db = db
        self.current = None

    def login(self, username, password):
        conn = self.db.connect()
        try:
            row = conn.execute("SELECT * FROM employees WHERE username = ?", (username,)).fetchone()
        finally:
            conn.close()

        if not row or not row["is_active"] or not pwd_ctx.verify(password, row["password_hash"]):
            logger.warning("employee_login_failed", username=username)
            raise PermissionDenied("Invalid username or password")

        self.current = {
            "id": row["id"],
            "username": row["username"],
            "name": row["name"],
            "role": row["role"],
            "permissions": {p.strip() for p in (row["permissions"] or "").split(",") if p.strip()},
        }
        logger.info("employee_logged_in", username=username, role=row["role"])
        return self.current

    def logout(self):
        self.current = None

    @property
    def is_owner(self):
        return bool(self.current) and self.current["role"] == OWNER_ROLE

    def get_current_employee_name(self):
        if not self.current:
            return None
        return self.current["name"]

    def has_permission(self, capability):
        if not self.current:
            return False
        return self.is_owner or capability in self.current["permissions"]
