"""User-facing reply texts sent by the labeler bot."""

from __future__ import annotations

from collections.abc import Sequence

from services.state.conversation_phase.resolver import SUCCESS_MARKER

LABEL_DELAY_NOTE = "> Note: It will take a few seconds for the label to be appear."

VERIFIED = f"""{SUCCESS_MARKER}

To link github repo send a message like the follow. We will confirm you are a collaborator on the repo.

repo: your-username/your-repo

> Note: Only public repos are supported for now."""

MISSING_USERNAME = "You must provide a GitHub username."

NOT_LINKED = "You must list your Bluesky handle in your GitHub profile."

IDENTITY_MISMATCH = (
    "The account you're sending the message from is not the same as the "
    "account you listed in your GitHub profile."
)

VERIFY_LOOKUP_FAILED = "Couldn't find your Bluesky profile."

NOT_VERIFIED = """We couldn't find a verified GitHub account for you. Verify first by sending:

github: your-username"""

MALFORMED_REPO = """Send the repo in this format:

repo: your-username/your-repo"""

REPO_NAME_TOO_LONG = (
    "That repo name is too long to use as a label. Label names are limited "
    "to 100 characters after digits are spelled out."
)

NO_CONTRIBUTION = "You have not merged any PRs to the repo so we cannot add the label."

RESET = (
    "All labels have been cleared! It may take a few minutes for the changes "
    "to be reflected."
)

NO_ACTIVE_LABELS = "You don't have any labels yet."

GENERIC_FAILURE = "Something went wrong. Please try again."


def greeting(*, max_labels: int) -> str:
    return f"""Hello! Let's onboard you to the GitHub labeler bot!

This bot lets you add labels for repos you are a contributor to. You can add up to {max_labels}.

First let's verify your GitHub account. For this to work you must list your Bluesky handle in your GitHub profile.

Send your GitHub username in this format:

github: your-username"""


def help_text(*, source_url: str) -> str:
    return f"""These are the commands you can use:

- "github: your-username" to verify your GitHub account
- "repo: your-username/your-repo" to add a label to your repo
- "/labels" to list your current labels
- "/reset" to clear all labels
- "/help" to see these commands

If you want to see the source code or fix a bug check out the repo: {source_url}"""


def owned(repository: str) -> str:
    return (
        f"Success! You own the {repository} repo. And qualified for the label."
        f"\n\n{LABEL_DELAY_NOTE}"
    )


def contributed(repository: str) -> str:
    return (
        f"Success! You contributed to {repository}. And qualified for the label."
        f"\n\n{LABEL_DELAY_NOTE}"
    )


def already_labeled(repository: str) -> str:
    return f"You already have the label for {repository}."


def cap_reached(*, max_labels: int) -> str:
    return (
        f"You already have {max_labels} labels, which is the most you can have. "
        'Send "/reset" to clear them and start over.'
    )


def identifier_collision(repository: str) -> str:
    return (
        f"The label for {repository} is already used by a different repo, "
        "so we cannot add it."
    )


def active_labels(values: Sequence[str], *, max_labels: int) -> str:
    if not values:
        return NO_ACTIVE_LABELS
    lines = "\n".join(f"- {value}" for value in values)
    return f"Your labels ({len(values)}/{max_labels}):\n\n{lines}"
