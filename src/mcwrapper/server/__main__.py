"""``python -m mcwrapper.server`` runs the command relay for a started server."""

from mcwrapper.server.relay import main

main()
