"""Role classification — how one player took part in each game.

Every per-player aggregation reads the views built here instead of
re-deriving role, side and outcome on its own.
"""


def classify_player_game(game, player):
    """Annotate one game with the player's role, team, straggler flag and outcome.

    Role precedence: commander of side 1, commander of side 2, team one
    member, team two member. A player found nowhere falls back to a
    teammate with no team and a loss. Straggler membership is checked
    independently and only fills in the team when none was found yet;
    it never changes role or team_won.
    """
    role, team, team_won = "teammate", None, False

    if game["commander1"] == player:
        role, team = "commander", 1
    elif game["commander2"] == player:
        role, team = "commander", 2
    elif player in game["team_one"]:
        team = 1
    elif player in game["team_two"]:
        team = 2

    if team == 1:
        team_won = game["winner"] == game["commander1"]
    elif team == 2:
        team_won = game["winner"] == game["commander2"]

    in_one_stragglers = player in game["team_one_stragglers"]
    in_two_stragglers = player in game["team_two_stragglers"]
    is_straggler = in_one_stragglers or in_two_stragglers

    # Stragglers-only keep team_won False; the side is still recorded
    if team is None:
        if in_one_stragglers:
            team = 1
        elif in_two_stragglers:
            team = 2

    view = dict(game)
    view.update({
        "player": player,
        "role": role,
        "team": team,
        "is_straggler": is_straggler,
        "team_won": team_won,
    })
    return view


def classify_player_games(games, player):
    """Classify every game for one player, preserving order."""
    return [classify_player_game(g, player) for g in games]


def is_thug(view):
    """A regular teammate: not the commander and not a straggler."""
    return view["role"] == "teammate" and not view["is_straggler"]


def on_roster(view):
    """True if the player commanded or sat in a team array, not only a straggler list."""
    if view["role"] == "commander":
        return True
    return view["player"] in view["team_one"] or view["player"] in view["team_two"]


def player_faction(view):
    """Faction of the side the player was on, or None if the side is unknown."""
    if view["team"] == 1:
        return view["faction1"]
    if view["team"] == 2:
        return view["faction2"]
    return None


def side_roster(view):
    """Everyone on the player's side (commander, team, stragglers), excluding the player."""
    if view["team"] == 1:
        side = [view["commander1"], *view["team_one"], *view["team_one_stragglers"]]
    elif view["team"] == 2:
        side = [view["commander2"], *view["team_two"], *view["team_two_stragglers"]]
    else:
        return []
    seen = set()
    mates = []
    for name in side:
        if name == view["player"] or name in seen:
            continue
        seen.add(name)
        mates.append(name)
    return mates
