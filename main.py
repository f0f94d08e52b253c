import marimo

__generated_with = "0.18.3"
app = marimo.App()


@app.cell
def _():
    import block_config as bc
    from IPython.lib.pretty import pprint
    return bc, pprint


@app.cell
def _(bc):
    source = bc.TextConfigSource(
        """
        [ someBlock ]
        someKey = "some string"
        otherKey = 12

        [ cookies: sugar ]
        letters = 'a'..'e'
        """
    )
    conf = bc.Configuration(source)
    return conf, source


@app.cell
def _(conf):
    conf.on_change(
        "someBlock", "otherKey", lambda old, new: print(f"otherKey: {old} -> {new}")
    )
    conf.parse_config()
    return


@app.cell
def _(conf, pprint):
    pprint(conf)
    return


@app.cell
def _(conf, source):
    source.text = source.text.replace("otherKey = 12", "otherKey = 13")
    conf.rehash()
    return


@app.cell
def _(conf):
    conf.get("someBlock", "otherKey"), conf.names_of_block("cookies")
    return


if __name__ == "__main__":
    app.run()
