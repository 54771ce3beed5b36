"""
dataform exceptions
"""


class DataFormError(Exception):
    """Base exception for dataform"""
    pass


class RegistryError(DataFormError):
    """Field handler registry error"""
    pass


class WSError(DataFormError):
    """Web service returned an error or could not be reached"""

    def __init__(self, message: str, errorcode: str = None):
        super().__init__(message)
        self.errorcode = errorcode


class UploadError(WSError):
    """File upload was rejected"""
    pass


class EntriesFetchError(WSError):
    """Entry list could not be fetched"""
    pass
