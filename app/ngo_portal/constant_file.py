from dotenv import load_dotenv
import os

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Token settings
jwt_secret_key = os.getenv("JWT_SECRET_KEY", "fallback-secret-key-for-development")
jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", 10))

# Uploads
upload_root = os.getenv("UPLOAD_ROOT", os.path.join(BASE_DIR, "uploads"))
allowed_image_types = {"jpeg", "jpg", "png", "gif"}
allowed_document_types = {"pdf", "doc", "docx"}
max_documents = 5

log_level = os.getenv("LOG_LEVEL", "INFO")

# Roles
ROLE_MEMBER = "member"
ROLE_VOLUNTEER = "volunteer"
ROLE_DONOR = "donor"
ROLE_ADMIN = "admin"
ROLE_TRAINEE = "trainee"
ROLE_COMPANY = "company"
ROLE_NGO = "ngo"

ALL_ROLES = (ROLE_MEMBER, ROLE_VOLUNTEER, ROLE_DONOR, ROLE_ADMIN, ROLE_TRAINEE, ROLE_COMPANY, ROLE_NGO)
APPROVAL_ROLES = (ROLE_COMPANY, ROLE_NGO)
