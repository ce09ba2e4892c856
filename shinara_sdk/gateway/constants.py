API_KEY_HEADER = "X-API-Key"
SDK_PLATFORM_HEADER = "X-SDK-Platform"

KEY_VALIDATE_PATH = "/api/key/validate"
CODE_VALIDATE_PATH = "/api/code/validate"
TRACKING_SESSION_PATH = "/sdknewtrackingsession"
APP_OPEN_PATH = "/appopen"
NEW_USER_PATH = "/newuser"
IAP_PURCHASE_PATH = "/iappurchase"
