from pdf_openai_querytool.main import main

if __name__ == "__main__":
    main()
