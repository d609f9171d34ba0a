from notion_reader.api.models import NotionDatabase, NotionObject


def extract_title(resource: NotionObject) -> str:
    """Return the text of the first title-kind property, or an empty string."""
    for value in resource.properties.values():
        if value.type == "title":
            if isinstance(value.title, list):
                return "".join(rt.plain_text for rt in value.title)
            return ""
    return ""


def display_title(resource: NotionObject) -> str:
    """Title for listings; databases keep theirs outside the property map."""
    title = extract_title(resource)
    if not title and isinstance(resource, NotionDatabase):
        title = "".join(rt.plain_text for rt in resource.title)
    return title
