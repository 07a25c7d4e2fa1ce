# rd_presets.py
# Named Gray–Scott regimes: [name, Da, Db, feed, kill]

presets = [["calm",      1.0, 0.5, 0.036, 0.064],
           ["spiral",    1.0, 0.5, 0.018, 0.052],
           ["worms",     1.0, 0.5, 0.025, 0.060],
           ["chaotic",   1.0, 0.6, 0.030, 0.055],
           ["explosive", 0.9, 0.8, 0.020, 0.046]]

PRESET_NAMES = [p[0] for p in presets]


def get_preset(which):
    """
    Look a preset up by index (0..4) or by name.
    Returns dict(name=..., da=..., db=..., feed=..., kill=...).
    """
    if isinstance(which, str):
        if which not in PRESET_NAMES:
            raise KeyError(f"Unknown preset {which!r}; choose from {', '.join(PRESET_NAMES)}.")
        row = presets[PRESET_NAMES.index(which)]
    else:
        i = int(which)
        if not 0 <= i < len(presets):
            raise IndexError(f"Preset index {i} out of range 0..{len(presets) - 1}.")
        row = presets[i]
    name, da, db, feed, kill = row
    return dict(name=name, da=da, db=db, feed=feed, kill=kill)
