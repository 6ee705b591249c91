"""SecureVault Session Meta information.
   SecureVault keeps vault secrets sealed with a session-scoped key
   and enrolls fingerprint authenticators for vault unlock.
"""
__title__ = 'securevault'
__description__ = (
   'SecureVault keeps vault secrets sealed with a session-scoped key '
   'and enrolls fingerprint authenticators for vault unlock.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/securevault'
