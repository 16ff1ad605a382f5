# Services package.
#
#   post_service  — PostService: CRUD, likes and comments for Post
#   user_service  — create/read for User
#
# Services never commit: the router layer controls the transaction
# boundary via the ``get_db`` dependency.
