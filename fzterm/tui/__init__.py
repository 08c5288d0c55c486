"""Terminal events, attributes, borders, themes, key decoding and a light ANSI renderer."""