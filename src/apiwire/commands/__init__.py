"""Built-in CLI sub-commands for apiwire.

* :mod:`~apiwire.commands.routes` -- list the POST URL of every visible
  function of a schema.
* :mod:`~apiwire.commands.call` -- invoke one function and print its
  decoded result.

Each module exports a plain callback registered on the root app by
:func:`apiwire.app.main`.
"""
