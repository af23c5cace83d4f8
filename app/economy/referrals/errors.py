class ReferralRewardError(Exception):
    pass


class ReferralRowVanishedError(ReferralRewardError):
    def __init__(self, invited_user_id: int) -> None:
        super().__init__(f"referral row for invited user {invited_user_id} vanished during finalize")
        self.invited_user_id = invited_user_id
