class ProvisioningError(Exception):
    pass
