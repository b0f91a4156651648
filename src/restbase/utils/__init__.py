import inflection

pluralize = inflection.pluralize
singularize = inflection.singularize


def classify(name: str) -> str:
    """
    Turns a relation name into the name of the class that backs it, e.g.
    ``remote_links`` to ``RemoteLink`` and ``reporter`` to ``Reporter``.
    """
    return inflection.camelize(singularize(name))
