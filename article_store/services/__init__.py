# Services package.
#
#   article_service  — aggregate builder for Article + Sections:
#                      in-memory assembly, validation, persistence and
#                      read-back helpers
#
# Functions that touch the database accept an AsyncSession as their first
# argument and only flush; the transaction boundary belongs to the caller
# (see ``database.session_scope``).
