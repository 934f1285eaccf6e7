"""
NoteSync - client-side note synchronization core

Keeps a live, ordered projection of the signed-in user's notes on top of a
managed document store, and gates it on the identity provider's session.

Author: Cosmo D'Antuono
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Cosmo D'Antuono"
__email__ = "cosmo.dantuono@gmail.com"
