KEY_PREFIX = "SHINARA_SDK_"

SETUP_COMPLETED_KEY = f"{KEY_PREFIX}SETUP_COMPLETED"
REFERRAL_CODE_KEY = f"{KEY_PREFIX}REFERRAL_CODE"
PROGRAM_ID_KEY = f"{KEY_PREFIX}PROGRAM_ID"
REFERRAL_CODE_ID_KEY = f"{KEY_PREFIX}REFERRAL_CODE_ID"
EXTERNAL_USER_ID_KEY = f"{KEY_PREFIX}EXTERNAL_USER_ID"
AUTO_GEN_EXTERNAL_USER_ID_KEY = f"{KEY_PREFIX}AUTO_GEN_EXTERNAL_USER_ID"

PROCESSED_TRANSACTIONS_SET = f"{KEY_PREFIX}PROCESSED_TRANSACTIONS"
REGISTERED_USERS_SET = f"{KEY_PREFIX}REGISTERED_USERS"
