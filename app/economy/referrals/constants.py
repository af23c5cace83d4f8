import re

REFERRAL_REWARD_DAYS = 7
FRIENDS_PAGE_SIZE_DEFAULT = 50
FRIENDS_PAGE_SIZE_MAX = 200
START_PAYLOAD_REFERRAL_RE = re.compile(r"ref_(\d{1,20})", re.ASCII)
